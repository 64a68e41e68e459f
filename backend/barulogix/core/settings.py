from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, AliasChoices, model_validator


_AUTH_PROVIDERS = ("local", "supabase")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "BaruLogix API"
    ENV: str = Field(default="lab", validation_alias=AliasChoices("BARULOGIX_ENV", "ENV"))  # lab|prod
    DATABASE_URL: str = Field(
        default="sqlite:///./barulogix.db",
        validation_alias=AliasChoices("BARULOGIX_DATABASE_URL", "DATABASE_URL"),
    )
    AUTO_CREATE_DB: bool = Field(default=True, validation_alias=AliasChoices("BARULOGIX_AUTO_CREATE_DB", "AUTO_CREATE_DB"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("BARULOGIX_LOG_LEVEL", "LOG_LEVEL"))

    # Identidad: "local" (usuarios + JWT propio) o "supabase" (auth hospedado)
    AUTH_PROVIDER: str = Field(default="local", validation_alias=AliasChoices("BARULOGIX_AUTH_PROVIDER", "AUTH_PROVIDER"))
    AUTH_JWT_SECRET: str = Field(
        default="",
        validation_alias=AliasChoices("BARULOGIX_AUTH_JWT_SECRET", "AUTH_JWT_SECRET", "JWT_SECRET"),
    )
    AUTH_JWT_TTL_MIN: int = Field(
        default=60 * 24 * 7,
        validation_alias=AliasChoices("BARULOGIX_AUTH_JWT_TTL_MIN", "AUTH_JWT_TTL_MIN"),
    )
    AUTH_COOKIE_NAME: str = Field(
        default="sb-access-token",
        validation_alias=AliasChoices("BARULOGIX_AUTH_COOKIE_NAME", "AUTH_COOKIE_NAME"),
    )

    SUPABASE_URL: str = Field(default="", validation_alias=AliasChoices("BARULOGIX_SUPABASE_URL", "SUPABASE_URL"))
    SUPABASE_ANON_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("BARULOGIX_SUPABASE_ANON_KEY", "SUPABASE_ANON_KEY"),
    )
    SUPABASE_TIMEOUT_S: int = Field(default=10, validation_alias=AliasChoices("BARULOGIX_SUPABASE_TIMEOUT_S", "SUPABASE_TIMEOUT_S"))

    # Bootstrap del administrador (deshabilitado si la clave está vacía)
    ADMIN_BOOTSTRAP_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("BARULOGIX_ADMIN_BOOTSTRAP_KEY", "ADMIN_BOOTSTRAP_KEY"),
    )
    ADMIN_EMAIL: str = Field(default="admin@barulogix.com", validation_alias=AliasChoices("BARULOGIX_ADMIN_EMAIL", "ADMIN_EMAIL"))
    ADMIN_PASSWORD: str = Field(default="", validation_alias=AliasChoices("BARULOGIX_ADMIN_PASSWORD", "ADMIN_PASSWORD"))
    ADMIN_NAME: str = Field(default="Administrador BaruLogix", validation_alias=AliasChoices("BARULOGIX_ADMIN_NAME", "ADMIN_NAME"))

    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 200
    MAX_IMPORT_PACKAGES: int = 1000
    REPORTS_DEFAULT_DAYS: int = 30

    @model_validator(mode="after")
    def _security_invariants(self):
        provider = (self.AUTH_PROVIDER or "").strip().lower()
        if provider not in _AUTH_PROVIDERS:
            raise ValueError(f"AUTH_PROVIDER inválido: {self.AUTH_PROVIDER!r} (use: local | supabase)")
        self.AUTH_PROVIDER = provider

        sec = (self.AUTH_JWT_SECRET or "").strip()
        if self.ENV == "prod" and provider == "local":
            if not sec:
                raise ValueError("SECURITY: AUTH_JWT_SECRET vacío (obligatorio con ENV=prod)")
            if len(sec) < 32:
                raise ValueError("SECURITY: AUTH_JWT_SECRET corto (min 32 chars)")
        # normaliza (quita espacios accidentales)
        self.AUTH_JWT_SECRET = sec

        if provider == "supabase":
            if not self.SUPABASE_URL.strip() or not self.SUPABASE_ANON_KEY.strip():
                raise ValueError("AUTH_PROVIDER=supabase requiere SUPABASE_URL y SUPABASE_ANON_KEY")
            self.SUPABASE_URL = self.SUPABASE_URL.strip().rstrip("/")

        if self.DEFAULT_PAGE_SIZE < 1 or self.MAX_PAGE_SIZE < self.DEFAULT_PAGE_SIZE:
            raise ValueError("DEFAULT_PAGE_SIZE debe estar entre 1 y MAX_PAGE_SIZE")

        return self


settings = Settings()
