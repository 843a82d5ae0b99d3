from __future__ import annotations

from onboarding_api.services.rag.types import Section

MAX_SUGGESTIONS = 3

CHAT_GENERAL_SUGGESTIONS: tuple[str, ...] = (
    "What should I do next?",
    "Are there any common mistakes to avoid?",
    "How long does this typically take?",
    "Do you have any tips for this step?",
)

CHAT_SECTION_SUGGESTIONS: dict[Section, tuple[str, ...]] = {
    Section.PROFILE: (
        "What makes a professional profile photo?",
        "How long should my bio be?",
        "Which expertise areas should I select?",
        "What languages should I list?",
        "How do I highlight my unique experiences?",
    ),
    Section.PERSONAL_INFO: (
        "What documents do I need for verification?",
        "How secure is my personal information?",
        "What if I need to update my address later?",
        "Do I need to provide a phone number?",
        "What about emergency contact information?",
    ),
    Section.PAYMENT: (
        "Which payment method is fastest?",
        "What tax documents do I need?",
        "When will I receive my first payment?",
        "Are there any fees I should know about?",
        "How do I update my banking information?",
    ),
    Section.TOURS: (
        "How should I price my tours?",
        "What photos work best for tour listings?",
        "How do I write compelling tour descriptions?",
        "How many tours should I create initially?",
        "What makes a tour stand out?",
    ),
    Section.CALENDAR: (
        "How do I handle booking conflicts?",
        "Should I offer tours every day?",
        "What about different time zones?",
        "How far in advance should I set availability?",
        "Can I block out personal time?",
    ),
    Section.QUIZ: (
        "How can I prepare for the quiz?",
        "What happens if I don't pass?",
        "Can I see my quiz results?",
        "How many attempts do I get?",
        "What topics should I study?",
    ),
}

HELP_COMMON_SUGGESTIONS: tuple[str, ...] = (
    "What are the requirements for this section?",
    "How long does this step typically take?",
    "What documents do I need to prepare?",
    "Are there any common mistakes to avoid?",
)

HELP_SECTION_SUGGESTIONS: dict[Section, tuple[str, ...]] = {
    Section.PROFILE: (
        "What makes a good profile photo?",
        "How should I write my bio?",
        "What expertise areas should I choose?",
        "How do I verify my identity?",
    ),
    Section.PERSONAL_INFO: (
        "What personal documents are required?",
        "How is my information kept secure?",
        "What if my address changes?",
        "How long does verification take?",
    ),
    Section.PAYMENT: (
        "What payment methods are supported?",
        "How do I set up international payments?",
        "What tax information is needed?",
        "When will I receive my first payment?",
    ),
    Section.TOURS: (
        "How many tours do I need to create?",
        "What makes a good tour description?",
        "How should I price my tours?",
        "What photos should I include?",
    ),
    Section.CALENDAR: (
        "How do I set my availability?",
        "Can I block out specific dates?",
        "How do I handle booking conflicts?",
        "What about different time zones?",
    ),
    Section.QUIZ: (
        "What topics are covered in the quiz?",
        "How can I prepare for the quiz?",
        "What happens if I don't pass?",
        "Can I retake the quiz?",
    ),
}


def _shares_keyword(suggestion: str, message_words: set[str]) -> bool:
    return any(len(word) > 3 and word in message_words for word in suggestion.lower().split(" "))


def chat_suggestions(message: str, section: Section | None = None) -> list[str]:
    """Up to three follow-ups that do not repeat what the user just asked.

    Suggestions sharing a word longer than three letters with the message are
    held back and only used to top the list up to three.
    """
    candidates = CHAT_SECTION_SUGGESTIONS.get(section, CHAT_GENERAL_SUGGESTIONS)
    message_words = set(message.lower().split(" "))

    fresh = [suggestion for suggestion in candidates if not _shares_keyword(suggestion, message_words)]
    repeated = [suggestion for suggestion in candidates if suggestion not in fresh]
    return (fresh + repeated)[:MAX_SUGGESTIONS]


def help_suggestions(question: str, section: Section | None = None) -> list[str]:
    if section is not None:
        return list(HELP_SECTION_SUGGESTIONS[section][:MAX_SUGGESTIONS])

    question_lower = question.lower()
    relevant = [
        suggestion
        for suggestion in HELP_COMMON_SUGGESTIONS
        if suggestion.lower().split(" ")[1] not in question_lower
    ]
    return relevant[:MAX_SUGGESTIONS]
