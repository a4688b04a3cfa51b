"""Localized user-facing messages for plan validation.

Codes are stable and machine-readable; messages are what the trainer sees
before any request is issued.
"""

from fitcoach.config.settings import settings

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "DUPLICATE_WEEKDAY": "{day} is already in this plan.",
        "EMPTY_TRAINING_DAY": "{day} has no exercises. Add exercises or mark it as a rest day.",
        "EMPTY_PLAN": "Add at least one training day.",
        "NODE_DELETED": "This item was removed and can no longer be edited.",
        "STALE_DRAFT": "The previous save was only partially applied. Reopen the plan before saving again.",
        "INVALID_DAY": "Invalid day: {reason}",
        "INVALID_EXERCISE": "Invalid exercise: {reason}",
    },
    "pl": {
        "DUPLICATE_WEEKDAY": "{day} jest już w tym planie.",
        "EMPTY_TRAINING_DAY": "{day} nie ma ćwiczeń. Dodaj ćwiczenia lub oznacz go jako dzień odpoczynku.",
        "EMPTY_PLAN": "Dodaj przynajmniej jeden dzień treningowy.",
        "NODE_DELETED": "Ten element został usunięty i nie można go już edytować.",
        "STALE_DRAFT": "Poprzedni zapis został zastosowany tylko częściowo. Otwórz plan ponownie przed kolejnym zapisem.",
        "INVALID_DAY": "Nieprawidłowy dzień: {reason}",
        "INVALID_EXERCISE": "Nieprawidłowe ćwiczenie: {reason}",
    },
}

DAY_NAMES: dict[str, list[str]] = {
    "en": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
    "pl": ["Poniedziałek", "Wtorek", "Środa", "Czwartek", "Piątek", "Sobota", "Niedziela"],
}


def day_names(locale: str | None = None) -> list[str]:
    """Weekday names indexed by day_of_week (0=Monday)."""
    return DAY_NAMES.get(locale or settings.locale, DAY_NAMES["en"])


def message(code: str, locale: str | None = None, **params: object) -> str:
    """Render the message for a validation code.

    Args:
        code: Validation error code
        locale: Optional locale override, defaults to settings.locale
        **params: Values substituted into the message template

    Returns:
        Localized message, or the code itself when no template exists
    """
    catalog = MESSAGES.get(locale or settings.locale, MESSAGES["en"])
    template = catalog.get(code)
    if template is None:
        return code
    return template.format(**params)
