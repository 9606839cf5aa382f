"""Curated platform facts loaded into the knowledge store on every (re)build."""

SEED_KNOWLEDGE: list[dict] = [
    # company
    {
        "id": "kozi-about",
        "content": "Kozi is a digital platform that connects employees with employers in Rwanda. Founded in 2021, Kozi operates in the domestic services industry (housekeeping, childcare and personal care) and serves businesses of all sizes with a commitment to transparency and efficiency.",
        "metadata": {"type": "company_info", "category": "about"},
    },
    {
        "id": "kozi-mission",
        "content": "Kozi's mission is to bridge the gap between employers and job seekers with a smart, data-driven recruitment platform that makes hiring faster, fairer and more reliable.",
        "metadata": {"type": "company_info", "category": "mission"},
    },
    {
        "id": "kozi-contact",
        "content": "Contact Kozi: phone +250 788 719 678, email info@kozi.rw, address Kigali-Kacyiru, KG 647 St, website www.kozi.rw. For support write to support@kozi.rw.",
        "metadata": {"type": "contact_info", "category": "support"},
    },
    # profile
    {
        "id": "profile-completion",
        "content": "To complete a Kozi profile: 1) add personal information (full name, phone, location), 2) select job category and experience level, 3) upload the required documents (CV and ID card), 4) add a profile photo (optional), 5) complete the skills and work experience sections. A complete profile increases visibility with employers.",
        "metadata": {"type": "guidance", "category": "profile"},
    },
    {
        "id": "required-documents",
        "content": "Required documents for Kozi registration: CV (PDF, DOC or DOCX, max 5MB), national ID card (JPG, PNG or PDF, max 2MB) and a profile photo (JPG or PNG, max 1MB, optional but recommended).",
        "metadata": {"type": "guidance", "category": "documents"},
    },
    {
        "id": "upload-process",
        "content": "Document upload: open the profile page, go to the document upload section, select the CV (required), upload a photo or scan of the ID card (required), optionally add a profile photo and check that every upload succeeded. The Kozi team reviews documents for verification.",
        "metadata": {"type": "process", "category": "documents"},
    },
    # jobs
    {
        "id": "job-categories",
        "content": "Kozi has two worker categories: Advanced Workers (graphic designers, accountants, professional chefs, software developers, marketing experts) and Basic Workers (professional cleaners, housemaids, babysitters, security guards, pool cleaners).",
        "metadata": {"type": "jobs", "category": "categories"},
    },
    {
        "id": "application-process",
        "content": "Job application process: register and complete the profile, pay the registration (service) fee if required, apply to published jobs matching your skills, wait for employer selection and get hired through Kozi's managed process.",
        "metadata": {"type": "jobs", "category": "process"},
    },
    {
        "id": "cv-structure",
        "content": "Professional CV structure: contact information, a 2-3 line professional summary, work experience with achievements, education (highest level first), skills relevant to the job category, certifications or training, and languages. Keep it short and targeted.",
        "metadata": {"type": "guidance", "category": "cv"},
    },
    # fees and payments
    {
        "id": "fees-house-cleaner-agreement",
        "content": "Fees and payments: the one-time administrative service fee is 40,000 RWF (non-refundable) and covers vetting, contract preparation, onboarding and ongoing management. The client pays the salary to Kozi and Kozi pays the worker; paying a worker directly is a breach.",
        "metadata": {"type": "policy", "category": "fees", "source": "agreement"},
    },
    {
        "id": "invoice-deadline-and-penalties",
        "content": "Invoices must be settled within 3 calendar days. The late fee is 5% of the invoice per week of delay, and non-payment beyond 30 days may trigger legal recovery at the client's cost.",
        "metadata": {"type": "policy", "category": "payments", "source": "agreement"},
    },
    {
        "id": "kozi-management-fee",
        "content": "Kozi manages worker employment: all salary payments go through Kozi, Kozi takes a transparent 10% management fee, contracts typically last 6 months and there is one free replacement within the first 30 days.",
        "metadata": {"type": "contract", "category": "management"},
    },
    {
        "id": "early-termination-no-refund",
        "content": "Early termination by the client requires 5 days written notice. The one-time service fee is not refunded.",
        "metadata": {"type": "policy", "category": "termination", "source": "agreement"},
    },
    {
        "id": "payroll-management-obligation",
        "content": "Clients keep an account on Kozi's platform for payroll management; workers are assigned to the client in the system and salary disbursement and records are managed on the platform.",
        "metadata": {"type": "policy", "category": "platform", "source": "agreement"},
    },
    {
        "id": "governing-law",
        "content": "Governing law: Republic of Rwanda, Labour Law No. 66/2018 of 30/08/2018 and the relevant Civil Code provisions.",
        "metadata": {"type": "policy", "category": "legal", "source": "agreement"},
    },
]


def tags_for(filename: str) -> list[str]:
    """Topic tags for a platform document, derived from its file name."""
    name = filename.lower()
    if "agreement" in name:
        return ["contract", "house cleaner", "fees", "payment", "terms"]
    if "request" in name:
        return ["job provider", "form", "requirements", "fees"]
    if "guidelines" in name:
        return ["worker", "guidelines", "conduct", "benefits", "process"]
    if "business profile" in name:
        return ["company", "about", "services", "contact"]
    return []
