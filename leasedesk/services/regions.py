"""Region extraction from free-form Russian storage addresses.

Used to build the "city" filter of the catalog: each distinct storage
address is reduced to a canonical region label such as
"Республика Татарстан" or "Москва".
"""

import re

_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
_WHITESPACE_RE = re.compile(r"\s+")
_POSTAL_INDEX_RE = re.compile(r"^\d{5,6}(?:\s*,\s*|\s+)")

_REGION_PART_RE = re.compile(
    r"(область|\bобл\b\.?|край|республика|\bресп\b\.?|автономный округ"
    r"|автономная область|\bАО\b|кузбасс|чувашия)",
    re.IGNORECASE,
)
# Settlement-level words that end the region part of an address chunk
_SETTLEMENT_SPLIT_RE = re.compile(
    r"\s+(?=(?:(?:район|р-н|улус|г|город|пгт|посел(?:ок|ение)?|село|деревня|тер|мкр)\b|месторожд))",
    re.IGNORECASE,
)
_TRAILING_AO_RE = re.compile(r"\s+\bАО\b$", re.IGNORECASE)
_FEDERAL_CITY_RE = re.compile(
    r"^(?:(?:город|г\.?)\s*)?(москва|санкт-петербург|севастополь)\b",
    re.IGNORECASE,
)

# (substrings that must all occur in the lowercased label, canonical label)
_CANONICAL_REGIONS: list[tuple[tuple[str, ...], str]] = [
    (("ханты-мансий",), "Ханты-Мансийский автономный округ - Югра"),
    (("ямало-ненец",), "Ямало-Ненецкий АО"),
    (("саха", "якут"), "Республика Саха (Якутия)"),
    (("татарстан",), "Республика Татарстан"),
    (("бурят",), "Республика Бурятия"),
    (("башкортостан",), "Республика Башкортостан"),
    (("коми",), "Республика Коми"),
    (("мордов",), "Республика Мордовия"),
    (("хакаси",), "Республика Хакасия"),
    (("удмурт",), "Удмуртская Республика"),
    (("чуваш",), "Чувашская Республика"),
    (("кемеровск", "кузбасс"), "Кемеровская область - Кузбасс"),
    (("санкт-петербург",), "Санкт-Петербург"),
    (("севастополь",), "Севастополь"),
]


def normalize_region_label(value: str) -> str:
    """Expand abbreviations and strip noise from a region label."""
    text = re.sub(r"^рф\s*,\s*", "", value, flags=re.IGNORECASE)
    text = re.sub(r"^россия\s*,\s*", "", text, flags=re.IGNORECASE)
    text = _ZERO_WIDTH_RE.sub("", text)
    text = re.sub(r"\bресп\b\.?", "Республика", text, flags=re.IGNORECASE)
    text = re.sub(r"\bобл\b\.?", "область", text, flags=re.IGNORECASE)
    text = re.sub(r"/Якутия/", "(Якутия)", text, flags=re.IGNORECASE)
    text = _WHITESPACE_RE.sub(" ", text).strip()
    return re.sub(r"[.,;]+$", "", text)


def canonicalize_region_label(value: str) -> str:
    normalized = normalize_region_label(value)
    lower = normalized.lower()

    for needles, label in _CANONICAL_REGIONS:
        if all(needle in lower for needle in needles):
            return label
    if lower == "москва":
        return "Москва"
    return normalized


def extract_region(address: str) -> str | None:
    """Best-effort region of a storage address, or None if none is recognizable.

    Examples:
        >>> extract_region("420000, Респ. Татарстан, г. Казань, ул. Баумана 1")
        'Республика Татарстан'
        >>> extract_region("г. Москва, ул. Тверская 1")
        'Москва'
    """
    normalized = _WHITESPACE_RE.sub(" ", address).strip()
    if not normalized:
        return None

    without_index = _POSTAL_INDEX_RE.sub("", normalized)
    parts = [part.strip() for part in without_index.split(",") if part.strip()]

    region_part = next((part for part in parts if _REGION_PART_RE.search(part)), None)
    if region_part:
        truncated = _SETTLEMENT_SPLIT_RE.split(region_part, maxsplit=1)[0]
        region = canonicalize_region_label(_TRAILING_AO_RE.sub("", truncated))
        if region:
            return region

    for part in parts:
        match = _FEDERAL_CITY_RE.match(part)
        if match:
            return canonicalize_region_label(match.group(1))
    return None
