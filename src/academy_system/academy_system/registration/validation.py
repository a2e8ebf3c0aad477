"""Field checks for the three onboarding steps.

Each validator returns a mapping of field name to message; an empty mapping
means the step is valid.
"""

from __future__ import annotations

from typing import Any, Dict

from ..common.validators import is_valid_email, is_valid_phone

BUSINESS_STEP = 0
ADMIN_STEP = 1
PREFERENCES_STEP = 2
STEP_NAMES = {BUSINESS_STEP: "businessInfo", ADMIN_STEP: "adminInfo", PREFERENCES_STEP: "preferences"}


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def validate_business_info(data: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if len(_text(data, "businessName")) < 2:
        errors["businessName"] = "Business name must be at least 2 characters"
    if not is_valid_email(_text(data, "businessEmail")):
        errors["businessEmail"] = "Enter a valid business email"
    if len(_text(data, "phoneNumber")) < 10:
        errors["phoneNumber"] = "Phone number must be at least 10 digits"
    return errors


def validate_admin_info(data: Dict[str, Any]) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if len(_text(data, "fullName")) < 2:
        errors["fullName"] = "Full name must be at least 2 characters"
    if not is_valid_email(_text(data, "email")):
        errors["email"] = "Enter a valid email"
    if not is_valid_phone(_text(data, "phone")):
        errors["phone"] = "Enter a valid phone number (10-15 digits)"
    if data.get("agreeToTerms") is not True:
        errors["agreeToTerms"] = "You must agree to the terms"
    return errors


def validate_preferences(data: Any) -> Dict[str, str]:
    if not isinstance(data, dict):
        return {"preferences": "Preferences must be an object"}
    return {}


_VALIDATORS = {
    BUSINESS_STEP: validate_business_info,
    ADMIN_STEP: validate_admin_info,
    PREFERENCES_STEP: validate_preferences,
}


def validate_step(step: int, data: Any) -> Dict[str, str]:
    if step not in _VALIDATORS:
        return {"step": f"Unknown step {step}"}
    if step != PREFERENCES_STEP and not isinstance(data, dict):
        return {STEP_NAMES[step]: "Section must be an object"}
    return _VALIDATORS[step](data)


def validate_all(payload: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
    """Validate every step; only failing steps appear in the result."""
    out: Dict[str, Dict[str, str]] = {}
    for step, name in STEP_NAMES.items():
        section = payload.get(name)
        if section is None and step == PREFERENCES_STEP:
            section = {}
        errors = validate_step(step, section if section is not None else {})
        if errors:
            out[name] = errors
    return out
