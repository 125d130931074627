from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    app_name: str = "Tenant Appointments"
    api_prefix: str = ""

    # Supabase configuration
    supabase_url: str = "your_supabase_url_here"
    supabase_key: str = "your_supabase_key_here"
    appointments_table: str = "appointments"
    tenants_table: str = "tenants"

    # Tenant authorization
    admin_tenant_id: str = "admin"
    fallback_tenant_id: Optional[str] = None # Unset = users without a tenant binding are rejected

    # Google Sheets mirror
    google_service_account_json: Optional[str] = None # Per-tenant credentials in DB take precedence
    mirror_sheet_title: Optional[str] = None # Defaults to the first worksheet

    timezone: str = "UTC"

    # Only used by init_db.py to provision the schema
    database_url: str = "sqlite:///./agenda.db"

    log_level: str = "INFO"
    new_relic_license_key: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
