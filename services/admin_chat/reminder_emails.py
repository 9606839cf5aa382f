"""Profile completion reminder mail, rendered from a normalized ProfileRecord."""

import html
from datetime import date

from shared.clients.mail.models.MailMessage import MailMessage
from shared.models.records import ProfileRecord

REMINDER_SUBJECT = "⚡ Complete Your Kozi Profile Today!"
PROFILE_URL = "https://kozi.rw/profile"
FOOTER_ADDRESS = "Kigali-Kacyiru, KG 647 St | +250 788 719 678"

BENEFITS = [
    "🎯 Get matched with better job opportunities",
    "⚡ Stand out to employers",
    "💼 Increase your chances of getting hired",
    "🌟 Access exclusive features",
]

_HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .header {{ background: #be185d; color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
    .content {{ background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px; }}
    .progress-bar {{ background: #e5e7eb; height: 30px; border-radius: 15px; overflow: hidden; margin: 20px 0; }}
    .progress-fill {{ background: #10b981; height: 100%; color: white; font-weight: bold; text-align: center; }}
    .missing-item {{ padding: 10px; margin: 5px 0; background: #fef3c7; border-left: 4px solid #f59e0b; }}
    .cta-button {{ display: inline-block; background: #be185d; color: white; padding: 15px 40px; text-decoration: none; border-radius: 25px; font-weight: bold; }}
    .footer {{ text-align: center; margin-top: 30px; color: #6b7280; font-size: 14px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>🚀 You're Almost There!</h1></div>
    <div class="content">
      <p>Hi <strong>{name}</strong>,</p>
      <p>Your Kozi profile is <strong>{completion}%</strong> complete. Just a few more steps to unlock all opportunities!</p>
      <div class="progress-bar"><div class="progress-fill" style="width: {completion}%">{completion}%</div></div>
      {missing_block}
      <p><strong>Why complete your profile?</strong></p>
      <ul>
{benefits}
      </ul>
      <p style="text-align: center"><a href="{url}" class="cta-button">Complete My Profile Now</a></p>
      <p>Need help? Reply to this email or contact us at <strong>support@kozi.rw</strong></p>
    </div>
    <div class="footer">
      <p>© {year} Kozi Platform. All rights reserved.</p>
      <p>{address}</p>
    </div>
  </div>
</body>
</html>
"""


def _completion_label(profile: ProfileRecord) -> str:
    return f"{profile.completion:g}"


def render_reminder_html(profile: ProfileRecord, year: int | None = None) -> str:
    missing_block = ""
    if profile.missing_fields:
        items = "\n".join(f'        <div class="missing-item">✅ {html.escape(field)}</div>' for field in profile.missing_fields)
        missing_block = f"<div>\n        <h3>📋 Complete these to reach 100%:</h3>\n{items}\n      </div>"
    return _HTML_TEMPLATE.format(
        name=html.escape(profile.full_name),
        completion=_completion_label(profile),
        missing_block=missing_block,
        benefits="\n".join(f"        <li>{b}</li>" for b in BENEFITS),
        url=PROFILE_URL,
        year=year or date.today().year,
        address=FOOTER_ADDRESS,
    )


def render_reminder_text(profile: ProfileRecord, year: int | None = None) -> str:
    lines = [f"Hi {profile.full_name},", "", f"Your Kozi profile is {_completion_label(profile)}% complete.", ""]
    if profile.missing_fields:
        lines.append("Complete these items to reach 100%:")
        lines += [f"- {field}" for field in profile.missing_fields]
        lines.append("")
    lines.append("Why complete your profile?")
    lines += [f"- {b.split(' ', 1)[1]}" for b in BENEFITS[:3]]
    lines += [
        "",
        f"Complete your profile now: {PROFILE_URL}",
        "",
        "Need help? Contact us at support@kozi.rw",
        "",
        f"© {year or date.today().year} Kozi Platform",
        FOOTER_ADDRESS,
    ]
    return "\n".join(lines)


def build_reminder_message(profile: ProfileRecord) -> MailMessage:
    """Raises ValueError for a profile without an email address."""
    if not profile.email:
        raise ValueError(f"Profile {profile.id or profile.full_name} has no email address")
    return MailMessage(
        to_email=profile.email,
        to_name=profile.full_name,
        subject=REMINDER_SUBJECT,
        html_content=render_reminder_html(profile),
        text_content=render_reminder_text(profile),
    )
