"""Plain-text report rendering for the admin chat.

Every function here is pure: same input, same text. Empty inputs get an
explicit "no data" variant instead of an empty table.
"""

from datetime import date

from services.admin_chat.analysis import JobSeekerAnalysis, PayrollAnalysis, ProfileAnalysis, Share, job_seeker_insight, percentage

CACHED_DATA_NOTE = "⚠️ Note: Using cached data. Real-time API unavailable."


##########################################
############### PRIMITIVES ###############
##########################################


def format_currency(amount: float | int | None, currency: str = "RWF") -> str:
    """RWF 1,234,567 (rounded to whole units)."""
    return f"{currency} {round(amount or 0):,}"


def format_date(value: date | None) -> str:
    return value.isoformat() if value else "N/A"


def format_table(rows: list[tuple[str, str]], min_value_width: int = 8) -> str:
    """Two column table, every cell padded to its column width.

    +---------------+----------+
    | Total Records | 12       |
    +---------------+----------+
    """
    if not rows:
        return "(no data)"
    label_width = max(len(label) for label, _ in rows)
    value_width = max(min_value_width, max(len(str(value)) for _, value in rows))
    border = f"+{'-' * (label_width + 2)}+{'-' * (value_width + 2)}+"
    lines = [border]
    lines += [f"| {label.ljust(label_width)} | {str(value).ljust(value_width)} |" for label, value in rows]
    lines.append(border)
    return "\n".join(lines)


def numbered(items: list[str], empty: str = "", sep: str = "\n") -> str:
    if not items:
        return empty
    return sep.join(f"{idx}. {item}" for idx, item in enumerate(items, start=1))


def bulleted(items: list[str], bullet: str = "•") -> str:
    return "\n".join(f"{bullet} {item}" for item in items)


def section(title: str, body: str) -> str:
    return f"{title}\n{body}"


##########################################
################ PAYROLL #################
##########################################


PAYROLL_FOLLOW_UPS = ["Send email notifications?", "Generate detailed report?", "Filter by specific period?"]


def format_payroll_report(analysis: PayrollAnalysis) -> str:
    parts = [
        "💰 PAYROLL STATUS UPDATE",
        section(
            "📊 OVERVIEW:",
            format_table(
                [
                    ("Total Records", str(analysis.total)),
                    ("Upcoming (30 days)", str(len(analysis.upcoming))),
                    ("Overdue", str(len(analysis.overdue))),
                    ("Urgent (2 days)", str(analysis.urgent_count)),
                    ("Total Amount", format_currency(analysis.total_amount)),
                ]
            ),
        ),
    ]

    if analysis.urgent:
        items = [
            f"Period: {p.record.period}\n"
            f"   Amount: {format_currency(p.record.amount)}\n"
            f"   Due: {format_date(p.record.due_date)} ({p.days_until} days)\n"
            f"   Status: {p.record.status.upper()}"
            for p in analysis.urgent
        ]
        parts.append(section("🚨 URGENT - DUE IN 2 DAYS:\n", numbered(items, sep="\n\n")))

    if analysis.upcoming:
        items = [
            f"{p.record.period} - {format_currency(p.record.amount)}\n   Due: {format_date(p.record.due_date)} ({p.days_until} days)"
            for p in analysis.upcoming[:5]
        ]
        parts.append(section("📅 UPCOMING PAYMENTS (Next 30 Days):\n", numbered(items, sep="\n\n")))

    if analysis.overdue:
        parts.append(f"⚠️ OVERDUE PAYMENTS: {len(analysis.overdue)}")

    first_action = "Process urgent payments immediately" if analysis.urgent else "Review payment schedules"
    parts.append(
        section(
            "✅ SUGGESTED ACTIONS:",
            numbered(
                [
                    first_action,
                    "Generate detailed payment report",
                    "Send payment notifications to employees",
                    "Verify bank account details",
                    "Prepare payment batch files",
                ]
            ),
        )
    )
    parts.append(section("💡 Would you like me to:", bulleted(PAYROLL_FOLLOW_UPS)))
    return "\n\n".join(parts)


def format_no_payroll_data() -> str:
    return "\n\n".join(
        [
            "💰 PAYROLL STATUS",
            "No payroll records found.",
            section("✅ ACTIONS:", numbered(["Check API connection", "Verify payroll system", "Contact technical support if needed"])),
        ]
    )


def format_local_payment_reminder(schedules: list[dict], today: date | None = None) -> str:
    """Reply built from the local payment_schedules table when the platform API is down."""
    if not schedules:
        return "\n\n".join(
            [
                "Payment Status Update (Local Data)",
                CACHED_DATA_NOTE,
                "No pending salary payments found.",
                section(
                    "Suggested Actions:",
                    bulleted(["Check API connection", "Review completed payments", "Contact technical support"], bullet="-"),
                ),
            ]
        )

    today = today or date.today()
    nxt = schedules[0]
    due_date = nxt.get("due_date")
    days_remaining = (due_date - today).days if isinstance(due_date, date) else "N/A"
    details = [
        f"Period: {nxt.get('payment_period') or 'N/A'}",
        f"Due Date: {format_date(due_date) if isinstance(due_date, date) else 'N/A'}",
        f"Days Remaining: {days_remaining} days",
        f"Employees: {nxt.get('employee_count') or 0}",
        f"Total Amount: {format_currency(float(nxt.get('total_amount') or 0), nxt.get('currency') or 'RWF')}",
    ]
    return "\n\n".join(
        [
            "Payment Reminder (Local Data)",
            CACHED_DATA_NOTE,
            section("Upcoming Salary Payment:", bulleted(details, bullet="-")),
            section(
                "Suggested Actions:",
                numbered(["Restore API connection for real-time data", "Generate payment report", "Verify bank account details"]),
            ),
        ]
    )


##########################################
############### DATABASE #################
##########################################


def _share_lines(shares: list[Share], with_percentage: bool = True) -> str:
    if with_percentage:
        return numbered([f"{s.name}: {s.count} ({s.percentage}%)" for s in shares], empty="No data available")
    return numbered([f"{s.name}: {s.count}" for s in shares], empty="No data available")


def format_database_report(analysis: JobSeekerAnalysis) -> str:
    return "\n\n".join(
        [
            "📊 DATABASE QUERY RESULTS",
            section(
                "📈 OVERVIEW:",
                format_table(
                    [
                        ("Total Job Seekers", str(analysis.total)),
                        ("Active Profiles", str(analysis.active)),
                        ("Inactive Profiles", str(analysis.inactive)),
                        ("Avg Completion", f"{analysis.completion}%"),
                    ]
                ),
            ),
            section("📍 TOP LOCATIONS:", _share_lines(analysis.locations[:5])),
            section("💼 TOP CATEGORIES:", _share_lines(analysis.categories[:5], with_percentage=False)),
            section("💡 INSIGHTS:", bulleted([job_seeker_insight(analysis)])),
            section(
                "✅ NEXT STEPS:",
                numbered(
                    [
                        "Filter by specific location or category",
                        f"Send reminders to incomplete profiles ({analysis.incomplete_estimate} users)",
                        "Generate detailed analytics report",
                        "Export data for external analysis",
                    ]
                ),
            ),
            'Would you like me to filter further? (e.g., "Show Kigali workers" or "Filter by category")',
        ]
    )


def format_no_database_data() -> str:
    return "\n\n".join(
        [
            "📊 DATABASE STATUS",
            "No job seeker records found.",
            section("✅ ACTIONS:", numbered(["Check API connection", "Verify database status", "Contact technical support"])),
        ]
    )


def format_local_database_summary(overview: dict) -> str:
    return "\n\n".join(
        [
            "Database Summary (Local Data)",
            CACHED_DATA_NOTE,
            section(
                "Employee Overview:",
                bulleted(
                    [
                        f"Total Employees: {overview.get('total_employees', 0)}",
                        f"Active: {overview.get('active_employees', 0)}",
                        f"Locations: {overview.get('locations', 0)}",
                    ],
                    bullet="-",
                ),
            ),
            section(
                "Suggested Actions:",
                numbered(["Restore API connection for real-time data", "Contact technical support", "Check system status"]),
            ),
        ]
    )


##########################################
################ PROFILES ################
##########################################


def format_band_lines(bands: list[Share], bullet: str = "•") -> str:
    return bulleted([f"{b.name}: {b.count} users ({b.percentage}%)" for b in bands], bullet=bullet)


def format_profile_analysis(analysis: ProfileAnalysis) -> str:
    return "\n\n".join(
        [
            "📋 PROFILE COMPLETION ANALYSIS",
            section(
                "📊 SUMMARY:",
                bulleted([f"Total Incomplete: {analysis.total}", f"Average Completion: {analysis.average_completion}%"]),
            ),
            section("📈 BREAKDOWN:", format_band_lines(analysis.bands)),
            section(
                "📍 TOP LOCATIONS WITH INCOMPLETE PROFILES:",
                numbered([f"{s.name}: {s.count} users" for s in analysis.locations], empty="No location data available"),
            ),
            section(
                "⚠️ COMMON MISSING FIELDS:",
                numbered(
                    [f"{s.name}: Missing in {s.count} profiles" for s in analysis.missing_fields],
                    empty="No specific missing fields data available",
                ),
            ),
            section(
                "✅ SUGGESTED ACTIONS:",
                numbered(
                    [
                        f"Send reminder emails to all {analysis.total} users",
                        "Target users with <50% completion first",
                        "Offer completion incentives",
                        "Schedule follow-up reminders",
                    ]
                ),
            ),
            "💡 Would you like me to send reminder emails now?",
        ]
    )


def format_no_incomplete_profiles() -> str:
    return "\n\n".join(
        [
            "✨ PROFILE STATUS",
            "🎉 Great news! All profiles are complete!",
            section("✅ ACTIONS:", numbered(["Monitor new registrations", "Review profile quality", "Generate completion report"])),
        ]
    )


def format_reminder_campaign(sent: int, failed: int, bands: list[Share]) -> str:
    return "\n\n".join(
        [
            "✉️ REMINDER CAMPAIGN COMPLETED",
            section(
                "📤 RESULTS:",
                bulleted([f"Sent: {sent}", f"Failed: {failed}", f"Success Rate: {percentage(sent, sent + failed)}%"]),
            ),
            section("📊 TARGET BREAKDOWN:", format_band_lines(bands, bullet="-")),
            section("✅ NEXT STEPS:", numbered(["Monitor open rates", "Track completion improvements", "Follow up in 7 days"])),
        ]
    )


##########################################
############# EMAIL/ANALYTICS ############
##########################################


def format_email_menu() -> str:
    return "\n\n".join(
        [
            "✉️ Email Processing",
            "I can categorize inbox items and draft professional replies.",
            section(
                "✅ NEXT STEPS:",
                numbered(
                    [
                        "Connect Gmail/IMAP (if not already)",
                        'Tell me: "Categorize inbox" or "Draft reply to X"',
                        'Or specify: "Summarize unread in last 24h"',
                    ]
                ),
            ),
        ]
    )


def format_analytics_menu() -> str:
    return "\n\n".join(
        [
            "📈 Analytics",
            "I can generate dashboards, KPIs and trends (registrations, profile completion, engagement, etc.).",
            section(
                "✅ NEXT STEPS:",
                numbered(
                    [
                        'Specify timeframe (e.g., "last 30 days")',
                        "Choose metrics (e.g., signups, active users, completion rate)",
                        'Ask: "Generate analytics report for last month"',
                    ]
                ),
            ),
        ]
    )
