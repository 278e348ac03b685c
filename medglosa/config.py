from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Gemini
    gemini_api_key: str = ""
    gemini_model: str = "gemini-3-flash-preview"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # Storage
    storage_dir: str = "data"                  # One JSON file per storage key
    storage_key: str = "medglosa_procedures"

    # Server
    server_base_url: str = "http://localhost:8000"
    port: int = 8000

    # Practice information
    practice_name: str = "Dra. Joelma Morais"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
