"""Holiday provider configuration router.

CRUD over the provider config list.  Every change rewrites the whole
stored list.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from holiday_calendar.core.dependencies import get_current_admin
from holiday_calendar.database import get_db
from holiday_calendar.schemas.provider_config import (
    ProviderConfig,
    ProviderConfigCreate,
    ProviderConfigUpdate,
)
from holiday_calendar.services.provider_config_store import (
    load_provider_configs,
    save_provider_configs,
)

router = APIRouter(prefix="/holiday-apis", tags=["Holiday Providers"])


def _find_index(configs: list[ProviderConfig], config_id: str) -> int:
    for index, config in enumerate(configs):
        if config.id == config_id:
            return index
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="API configuration not found",
    )


@router.get("", response_model=list[ProviderConfig])
async def list_provider_configs(
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """List configured holiday providers (defaults if none saved)."""
    return await load_provider_configs(db)


@router.post("", response_model=ProviderConfig, status_code=status.HTTP_201_CREATED)
async def create_provider_config(
    body: ProviderConfigCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Add a provider config.  The id defaults to ``{type}-{timestamp}``."""
    configs = await load_provider_configs(db)

    config_id = body.id or f"{body.type.value}-{int(datetime.now(timezone.utc).timestamp() * 1000)}"
    if any(c.id == config_id for c in configs):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="API configuration with this ID already exists",
        )

    config = ProviderConfig(**body.model_dump(exclude={"id"}), id=config_id)
    configs.append(config)
    await save_provider_configs(db, configs)
    return config


@router.put("/{config_id}", response_model=ProviderConfig)
async def update_provider_config(
    config_id: str,
    body: ProviderConfigUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Update fields of a provider config."""
    configs = await load_provider_configs(db)
    index = _find_index(configs, config_id)

    updated = configs[index].model_copy(update=body.model_dump(exclude_unset=True, exclude_none=True))
    configs[index] = ProviderConfig.model_validate(updated.model_dump())
    await save_provider_configs(db, configs)
    return configs[index]


@router.delete("/{config_id}")
async def delete_provider_config(
    config_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: dict = Depends(get_current_admin),
):
    """Remove a provider config.  Holidays it created are kept."""
    configs = await load_provider_configs(db)
    index = _find_index(configs, config_id)

    del configs[index]
    await save_provider_configs(db, configs)
    return {"message": "API configuration deleted"}
