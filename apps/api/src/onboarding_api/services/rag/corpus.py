from __future__ import annotations

from onboarding_api.services.rag.types import Document, Section

_ACQUISITION = """# Guide Acquisition process

## Process for Guides

- User applies using Become a Guide form (front end)
- New record is created as Guide-Applicant in the DB
- User can access the account to check the steps of their application
- User will find the first step to be sending the ID Verification
- Once ID Verification is approved, the next step to the user will be to have an interview with a Guide Acquisition Specialist (internal staff)
- Once the interview was approved, users would have access to the onboarding process (create tours, profile, photos, accounting)

## Process for Guide Acquisition Specialist

- While hunting for new guides, users would send the link to Become a Guide in order to get new applicants
- Users would access the Guide-Applicant View, which would contain the following filters:
  - City
  - Country
  - Name
  - Email
  - Experience
  - Licensed
  - Transportation
- Users would have the option to accept or reject each Guide-Applicant
- If accepted, Guide would move from Guide-Applicant to Guide to be onboarded and the onboarding process would start.
- If rejected, Guide would not have access to re-apply for 1 year.
- The Guide-Applicant would disappear from the Guide-Applicant View if accepted/rejected"""

_PROFILE = """# Settings - Profile (Step 1)

### Completed Criteria:
- Profile Picture
- Bio (700 ch)
- Areas of Expertise (1 selected) - Non-existent, would be great to have it
- Languages (1 selected)"""

_PERSONAL_AND_PAYMENT = """# Settings - Personal information (Step 2)

### Completed Criteria:
- First Name
- Last Name
- Date of birth - no longer in V3
- Email Address
- Address
- Home Phone
- Mobile Phone
- Emergency Contact

# Settings - Personal information - How you'll get paid - View/Edit (Payment)

### Adyen
Adyen active or direct deposit. The payment step is complete when the preferred payout method is Adyen with an active Adyen account, or when the preferred payout method is Direct Deposit.

Note: In V2 the W9 status changed to PROVIDED when the guide sent an email to accounting@toursbylocals.com and accounting approved the W9. Currently there is nowhere in the system that requests the form or allows the guide to upload the document directly. The Guide Acquisition Specialist requests the W9 personally and sends it to accounting without validation.

### Non-Adyen

- Currency
- How would you like to get paid
- PayPal: Email for payment
- Wire Transfer:
  - Banking Information
    - Beneficiary Name
    - Beneficiary bank: SWIFT
    - Beneficiary bank: IBAN
  - Beneficiary address
    - Street address
    - State/province/territory/country/region
    - City

### Payment method - Type and all fields
- If USA Guide - Social security number & W9 provided
- If Canada Guide - Social security number"""

_TOURS = """# Tours

### Completed Criteria:
- Tour 1 - published
- Tour 2 - published
- Tour 3 - published
- Customized Tour - created"""

_CALENDAR = """# Booking Management > CALENDAR

- Set personal events if applicable"""

_QUIZ = """# Quiz

### Completed Criteria:
- Solved"""

ONBOARDING_DOCUMENTS: tuple[Document, ...] = (
    Document(
        id="acquisition-process",
        title="Application and Interview Process",
        content=_ACQUISITION,
        # acquisition has no wizard section of its own
        section=Section.PROFILE,
        metadata={
            "step": "acquisition",
            "priority": "critical",
            "estimatedTime": "1-3 business days",
            "requirements": ["ID Verification", "Interview"],
        },
    ),
    Document(
        id="profile-setup-v3",
        title="Profile Requirements",
        content=_PROFILE,
        section=Section.PROFILE,
        metadata={
            "step": "profile",
            "priority": "high",
            "estimatedTime": "15-20 minutes",
            "requirements": ["Profile Picture", "Bio", "Expertise", "Languages"],
        },
    ),
    Document(
        id="personal-payment-v3",
        title="Personal and Payment Requirements",
        content=_PERSONAL_AND_PAYMENT,
        section=Section.PERSONAL_INFO,
        metadata={
            "step": "personal-info",
            "priority": "high",
            "estimatedTime": "20-30 minutes",
            "requirements": ["Personal Details", "Payment Method", "Tax Information"],
        },
    ),
    Document(
        id="tours-creation-v3",
        title="Tour Creation Requirements",
        content=_TOURS,
        section=Section.TOURS,
        metadata={
            "step": "tours",
            "priority": "high",
            "estimatedTime": "2-4 hours",
            "requirements": ["3 Published Tours", "1 Customized Tour"],
        },
    ),
    Document(
        id="calendar-management-v3",
        title="Calendar Setup",
        content=_CALENDAR,
        section=Section.CALENDAR,
        metadata={
            "step": "calendar",
            "priority": "medium",
            "estimatedTime": "5-10 minutes",
            "requirements": ["Set availability"],
        },
    ),
    Document(
        id="knowledge-quiz-v3",
        title="Quiz Requirement",
        content=_QUIZ,
        section=Section.QUIZ,
        metadata={
            "step": "quiz",
            "priority": "high",
            "estimatedTime": "1 hour",
            "requirements": ["Pass the quiz"],
        },
    ),
)


def all_sections() -> list[Section]:
    return list(Section)


def documents_by_section(section: Section) -> list[Document]:
    return [document for document in ONBOARDING_DOCUMENTS if document.section is section]


def document_by_id(document_id: str) -> Document | None:
    for document in ONBOARDING_DOCUMENTS:
        if document.id == document_id:
            return document
    return None
