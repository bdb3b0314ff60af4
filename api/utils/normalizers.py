"""
Input normalizers used before storing identifiers and comparing them.

Plates, DNIs and phone numbers are typed in many formats; normalizing them
keeps "ab 539-ro" and "AB539RO" from being registered as different units.
"""

import re


def normalize_plate(plate: str) -> str:
    """
    Normalize a license plate.

    Example: "ab 539-ro" -> "AB539RO"

    Args:
        plate: Plate as typed

    Returns:
        Upper-case plate without spaces or hyphens
    """
    if not plate:
        return ""
    return re.sub(r"[\s-]", "", plate.strip().upper())


def normalize_dni(dni: str) -> str:
    """Remove dots, spaces and hyphens: "25.678.901" -> "25678901" """
    if not dni:
        return ""
    return re.sub(r"[\s.\-]", "", dni.strip())


def normalize_phone(phone: str) -> str:
    """Remove spaces, hyphens and parentheses: "(011) 4567-8900" -> "01145678900" """
    if not phone:
        return ""
    return re.sub(r"[\s\-()]", "", phone.strip())


def normalize_email(email: str) -> str:
    if not email:
        return ""
    return email.strip().lower()
