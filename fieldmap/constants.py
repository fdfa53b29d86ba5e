"""Constants shared by the mapping engine."""


class ExpectedType:
    """Canonical value types a business field can expect."""
    CURRENCY = "currency"
    NUMBER = "number"
    PERCENTAGE = "percentage"
    DATE = "date"
    IDENTIFIER = "identifier"
    TEXT = "text"
    CATEGORICAL = "categorical"

    ALL = (CURRENCY, NUMBER, PERCENTAGE, DATE, IDENTIFIER, TEXT, CATEGORICAL)


class FieldCategory:
    """Catalog categories."""
    FINANCIAL = "financial"
    SALES = "sales"
    CUSTOMER = "customer"
    PRODUCT = "product"
    INVENTORY = "inventory"
    OPERATIONAL = "operational"
    MARKETING = "marketing"
    LOCATION = "location"
    TEMPORAL = "temporal"
    EMPLOYEE = "employee"
    LOGISTICS = "logistics"

    ALL = (
        FINANCIAL, SALES, CUSTOMER, PRODUCT, INVENTORY, OPERATIONAL,
        MARKETING, LOCATION, TEMPORAL, EMPLOYEE, LOGISTICS,
    )


class MatchReason:
    """Why a candidate field was proposed for a column."""
    NAME_MATCH = "name_match"
    ALIAS_MATCH = "alias_match"
    KEYWORD_MATCH = "keyword_match"
    TYPE_MATCH = "type_match"


class NormalizationReason:
    EMPTY = "empty"
    UNPARSEABLE = "unparseable"


# Default configuration values
DEFAULT_SAMPLE_SIZE = 20
DEFAULT_ACCEPTANCE_THRESHOLD = 0.5

# Upload handling
SUPPORTED_EXTENSIONS = (".csv", ".tsv", ".txt", ".xlsx", ".xlsm", ".json")

NO_DATA_NOTICE = "No data available"
