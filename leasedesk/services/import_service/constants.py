"""Constants for the vehicle offer import service."""

# Maximum data rows read from a single workbook
MAX_ROWS = 20000

# Errors echoed back in an import response (all of them are persisted)
MAX_RESPONSE_ERRORS = 100

# Inclusive range of acceptable model years
YEAR_MIN = 1950
YEAR_MAX = 2100

# MongoDB stores integers as signed 64-bit values
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Canonical vehicle offer fields, in declaration order. Every one of them
# must be present as a column in an imported workbook.
CANONICAL_FIELDS: list[str] = [
    "offer_code",
    "status",
    "brand",
    "model",
    "modification",
    "vehicle_type",
    "year",
    "mileage_km",
    "key_count",
    "pts_type",
    "has_encumbrance",
    "is_deregistered",
    "responsible_person",
    "storage_address",
    "days_on_sale",
    "price",
    "yandex_disk_url",
    "booking_status",
    "external_id",
    "crm_ref",
    "website_url",
]

# Tokens accepted by parse_boolean (compared after normalization + lowercase)
TRUE_TOKENS = frozenset({"да", "yes", "true", "1"})
FALSE_TOKENS = frozenset({"нет", "no", "false", "0"})

# Header alias table: canonical field -> accepted column headers.
# Aliases are compared after normalize_header(), so case, colons,
# repeated spaces and the ё/е spelling do not matter.
HEADER_ALIASES: dict[str, list[str]] = {
    "offer_code": [
        "Код предложения",
        "Код",
        "Код лота",
        "Номер предложения",
        "Offer code",
        "Offer ID",
        "offer_code",
    ],
    "status": [
        "Статус",
        "Статус предложения",
        "Статус лота",
        "Status",
        "Offer status",
    ],
    "brand": [
        "Марка",
        "Марка ТС",
        "Бренд",
        "Производитель",
        "Brand",
        "Make",
    ],
    "model": [
        "Модель",
        "Модель ТС",
        "Model",
    ],
    "modification": [
        "Модификация",
        "Комплектация",
        "Modification",
        "Trim",
    ],
    "vehicle_type": [
        "Тип ТС",
        "Тип транспортного средства",
        "Тип техники",
        "Вид ТС",
        "Vehicle type",
        "Type",
    ],
    "year": [
        "Год выпуска",
        "Год",
        "Год изготовления",
        "Year",
        "Model year",
    ],
    "mileage_km": [
        "Пробег",
        "Пробег, км",
        "Пробег (км)",
        "Пробег км",
        "Mileage",
        "Mileage, km",
        "Mileage km",
    ],
    "key_count": [
        "Количество ключей",
        "Кол-во ключей",
        "Ключи",
        "Keys",
        "Key count",
    ],
    "pts_type": [
        "ПТС/ЭПТС",
        "Тип ПТС",
        "ПТС",
        "Вид ПТС",
        "PTS type",
        "Title type",
    ],
    "has_encumbrance": [
        "Обременение",
        "Наличие обременения",
        "Есть обременение",
        "Encumbrance",
        "Has encumbrance",
    ],
    "is_deregistered": [
        "Снят с учета",
        "Снят с учёта",
        "Снято с учета",
        "Deregistered",
        "Is deregistered",
    ],
    "responsible_person": [
        "Ответственный",
        "Ответственный сотрудник",
        "Ответственное лицо",
        "Responsible",
        "Responsible person",
    ],
    "storage_address": [
        "Место хранения",
        "Адрес хранения",
        "Адрес стоянки",
        "Стоянка",
        "Storage address",
        "Storage",
    ],
    "days_on_sale": [
        "Дней в продаже",
        "Срок экспозиции",
        "Дни в продаже",
        "Кол-во дней в продаже",
        "Days on sale",
    ],
    "price": [
        "Цена",
        "Стоимость",
        "Цена, руб",
        "Цена, руб.",
        "Цена продажи",
        "Price",
    ],
    "yandex_disk_url": [
        "Яндекс Диск",
        "Ссылка на Яндекс Диск",
        "Ссылка на фото",
        "Фото",
        "Yandex Disk",
        "Photos",
    ],
    "booking_status": [
        "Статус брони",
        "Бронь",
        "Статус бронирования",
        "Booking status",
    ],
    "external_id": [
        "ID",
        "Внешний ID",
        "Идентификатор",
        "External ID",
    ],
    "crm_ref": [
        "CRM",
        "Ссылка CRM",
        "Номер в CRM",
        "CRM ref",
        "CRM reference",
    ],
    "website_url": [
        "Ссылка на сайт",
        "Сайт",
        "Ссылка на объявление",
        "Website",
        "Website URL",
    ],
}
