from dotenv import load_dotenv


def load_env() -> None:
    load_dotenv()


def is_model_configured(api_key: str | None) -> bool:
    return bool(api_key and api_key.strip())
