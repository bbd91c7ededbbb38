from fastapi import Header


def get_registrar_id(x_registrar_id: str | None = Header(default=None)) -> str | None:
    """Tenant scope for repository queries, taken from ``X-Registrar-Id``."""
    if x_registrar_id is None or not x_registrar_id.strip():
        return None
    return x_registrar_id.strip()
