"""Application constants."""

COMMANDS = (
    "run",
    "validate",
)
STAGES = (
    "load",
    "normalize",
    "deduplicate",
    "temporal",
    "reconcile",
    "surrogate_keys",
    "assemble",
    "publish",
)
ENTITY_TYPES = (
    "crm_customers",
    "crm_products",
    "crm_sales",
    "erp_customer_demographics",
    "erp_customer_locations",
    "erp_product_categories",
)
NOT_AVAILABLE = "n/a"
EXIT_SUCCESS = 0
EXIT_HARD_FAIL = 20
JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "entity",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
SURROGATE_KEY_NOTE = (
    "Surrogate keys are recomputed on every full reload and are only stable "
    "within a single published snapshot."
)
