from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from onboarding_api.services.rag.types import Section

SECTION_NAMES: dict[Section, str] = {
    Section.PROFILE: "profile setup",
    Section.PERSONAL_INFO: "personal information",
    Section.PAYMENT: "payment setup",
    Section.TOURS: "tour creation",
    Section.CALENDAR: "calendar management",
    Section.QUIZ: "knowledge quiz",
}


@dataclass(frozen=True)
class SectionInfo:
    id: Section
    title: str
    description: str
    order: int
    estimated_time: str
    requirements: tuple[str, ...]
    status: str = "available"

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id.value,
            "title": self.title,
            "description": self.description,
            "order": self.order,
            "estimatedTime": self.estimated_time,
            "requirements": list(self.requirements),
            "status": self.status,
        }


SECTION_METADATA: dict[Section, SectionInfo] = {
    Section.PROFILE: SectionInfo(
        id=Section.PROFILE,
        title="Profile Setup",
        description="Create your professional guide profile with photo, bio, and expertise areas",
        order=1,
        estimated_time="30-45 minutes",
        requirements=(
            "Professional photo",
            "Written bio (150-300 words)",
            "Language selection",
            "Expertise areas (up to 5)",
            "Identity verification",
        ),
    ),
    Section.PERSONAL_INFO: SectionInfo(
        id=Section.PERSONAL_INFO,
        title="Personal Information",
        description="Provide required personal details for verification and account setup",
        order=2,
        estimated_time="15-20 minutes",
        requirements=(
            "Government-issued ID",
            "Proof of address",
            "Contact information",
            "Identity verification",
        ),
    ),
    Section.PAYMENT: SectionInfo(
        id=Section.PAYMENT,
        title="Payment Setup",
        description="Configure your payment information for receiving tour payments",
        order=3,
        estimated_time="20-30 minutes",
        requirements=(
            "Bank account details",
            "Tax information",
            "Payment method verification",
        ),
    ),
    Section.TOURS: SectionInfo(
        id=Section.TOURS,
        title="Create Tours",
        description="Create and publish at least 3 tours to activate your account",
        order=4,
        estimated_time="2-4 hours",
        requirements=(
            "Minimum 3 published tours",
            "Professional photos (5+ per tour)",
            "Detailed descriptions (200+ words)",
            "Pricing setup",
            "Availability calendar",
        ),
    ),
    Section.CALENDAR: SectionInfo(
        id=Section.CALENDAR,
        title="Calendar Management",
        description="Set up your availability and booking calendar",
        order=5,
        estimated_time="20-30 minutes",
        requirements=(
            "Availability setup",
            "Time zone configuration",
            "Booking policies",
            "Calendar integration",
        ),
    ),
    Section.QUIZ: SectionInfo(
        id=Section.QUIZ,
        title="Knowledge Quiz",
        description="Complete the local knowledge quiz with 80% or higher score",
        order=6,
        estimated_time="2-3 hours preparation + 1 hour quiz",
        requirements=(
            "Study local knowledge materials",
            "Pass quiz with 80% score",
            "Complete within time limit",
        ),
    ),
}


def ordered_sections() -> list[SectionInfo]:
    return sorted(SECTION_METADATA.values(), key=lambda info: info.order)


def related_sections(section: Section, limit: int = 3) -> list[SectionInfo]:
    return [info for info in ordered_sections() if info.id is not section][:limit]


def provisional_guidance_content(info: SectionInfo) -> str:
    requirements = "\n".join(f"- {requirement}" for requirement in info.requirements)
    return (
        f"{info.title}\n\n"
        f"This section covers: {info.description}.\n\n"
        f"Requirements:\n{requirements}\n\n"
        f"Estimated time: {info.estimated_time}.\n\n"
        "The guidance assistant is still loading. Please refresh in a moment for more detailed guidance."
    )
