"""CPF and RG document number validation and formatting."""
import re

_NON_DIGITS = re.compile(r"\D")


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def _cpf_check_digit(digits: str) -> int:
    # weights run from len+1 down to 2
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    digit = 11 - (total % 11)
    return 0 if digit >= 10 else digit


def validate_cpf(cpf: str) -> bool:
    """Check length, repeated-digit sequences and both mod-11 check digits."""
    clean = digits_only(cpf)
    if len(clean) != 11:
        return False
    if clean == clean[0] * 11:
        return False
    if _cpf_check_digit(clean[:9]) != int(clean[9]):
        return False
    return _cpf_check_digit(clean[:10]) == int(clean[10])


def validate_rg(rg: str) -> bool:
    clean = digits_only(rg)
    return 7 <= len(clean) <= 9


def format_cpf(cpf: str) -> str:
    clean = digits_only(cpf)
    if len(clean) != 11:
        return clean
    return f"{clean[:3]}.{clean[3:6]}.{clean[6:9]}-{clean[9:]}"


def format_rg(rg: str) -> str:
    clean = digits_only(rg)
    if len(clean) == 9:
        return f"{clean[:2]}.{clean[2:5]}.{clean[5:8]}-{clean[8]}"
    return clean
