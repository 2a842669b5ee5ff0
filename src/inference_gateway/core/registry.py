"""
Activation registry: model catalog and activation state.
"""

import asyncio
import copy
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .errors import ModelNotFoundError
from ..models.catalog import (
    ActivationRecord,
    ActivationResult,
    ActiveModelInfo,
    DeactivationResult,
    ModelDescriptor,
    ModelStatus,
    ModelView,
    DEFAULT_CATALOG,
)
from ..models.response import utc_now

logger = logging.getLogger(__name__)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class ActivationRegistry:
    """
    Tracks which catalog models are activated and which one is active.

    Two pieces of state are kept: one ``ActivationRecord`` per model that
    has ever been activated, and the active slot naming the default model
    used by the active-model entry points. Records are authoritative for
    a model's own status; the slot only selects the default. Mutations are
    serialized by a lock.
    """

    def __init__(
        self,
        catalog: Optional[Iterable[Any]] = None,
        clock: Callable[[], str] = utc_now,
    ):
        """
        Initialize the registry.

        Args:
            catalog: Model descriptors (or dicts); defaults to the built-in catalog
            clock: Timestamp source
        """
        entries = DEFAULT_CATALOG if catalog is None else catalog
        self._catalog: Dict[str, ModelDescriptor] = {}
        for entry in entries:
            descriptor = entry if isinstance(entry, ModelDescriptor) else ModelDescriptor(**entry)
            self._catalog[descriptor.id] = descriptor

        self._records: Dict[str, ActivationRecord] = {}
        self._active_model: Optional[str] = None
        self._last_activity: Optional[str] = None
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def active_model(self) -> Optional[str]:
        return self._active_model

    @property
    def last_activity(self) -> Optional[str]:
        return self._last_activity

    def touch(self) -> str:
        """Record activity and return the timestamp."""
        self._last_activity = self._clock()
        return self._last_activity

    def in_catalog(self, model_id: str) -> bool:
        return model_id in self._catalog

    def get_record(self, model_id: str) -> Optional[ActivationRecord]:
        record = self._records.get(model_id)
        return record.model_copy(deep=True) if record else None

    def is_activated(self, model_id: str) -> bool:
        record = self._records.get(model_id)
        return record is not None and record.status == ModelStatus.ACTIVATED

    def _status(self, model_id: str) -> ModelStatus:
        record = self._records.get(model_id)
        return record.status if record else ModelStatus.AVAILABLE

    def list_models(self) -> List[ModelView]:
        """
        List every catalog model with its current status.

        Returns:
            Catalog entries decorated with status
        """
        return [
            ModelView(**descriptor.model_dump(), status=self._status(model_id))
            for model_id, descriptor in self._catalog.items()
        ]

    def get_model(self, model_id: str) -> Optional[ModelView]:
        """
        Get a catalog model with its status and active flag.

        Args:
            model_id: Model identifier

        Returns:
            Decorated entry, or None if the id is not in the catalog
        """
        descriptor = self._catalog.get(model_id)
        if descriptor is None:
            return None

        return ModelView(
            **descriptor.model_dump(),
            status=self._status(model_id),
            is_active=self._active_model == model_id,
        )

    async def activate_model(
        self,
        model_id: str,
        config: Optional[Dict[str, Any]] = None,
    ) -> ActivationResult:
        """
        Activate a model and make it the active model.

        Re-activating refreshes the timestamp and merges configuration.

        Args:
            model_id: Model identifier
            config: Configuration overrides merged into the record

        Returns:
            Activation result

        Raises:
            ModelNotFoundError: If the id is not in the catalog
        """
        logger.info(f"Activating model: {model_id}")

        if model_id not in self._catalog:
            logger.error(f"Error activating model {model_id}: not found")
            raise ModelNotFoundError(f"Model {model_id} not found", model_id=model_id)

        async with self._lock:
            now = self._clock()
            record = self._records.get(model_id)
            if record is None:
                record = ActivationRecord(
                    status=ModelStatus.ACTIVATED,
                    activated_at=now,
                    config=deep_merge({}, config or {}),
                )
                self._records[model_id] = record
            else:
                record.status = ModelStatus.ACTIVATED
                record.activated_at = now
                record.config = deep_merge(record.config, config or {})

            self._active_model = model_id
            self._last_activity = now

            return ActivationResult(
                active_model=model_id,
                status=ModelStatus.ACTIVATED,
                timestamp=now,
                config=copy.deepcopy(record.config),
            )

    async def deactivate_model(self) -> DeactivationResult:
        """
        Deactivate the active model and clear the active slot.

        Returns:
            Deactivation result naming the previous model (or None)
        """
        async with self._lock:
            now = self._clock()
            previous = self._active_model

            if previous and previous in self._records:
                record = self._records[previous]
                record.status = ModelStatus.DEACTIVATED
                record.deactivated_at = now

            self._active_model = None
            self._last_activity = now

        logger.info(f"Model deactivated: {previous}")
        return DeactivationResult(previous_model=previous, timestamp=now)

    def get_active_model(self) -> ActiveModelInfo:
        """
        Get the active model and its activation record.

        Returns:
            Active model info; ``active_model`` is None when none is active
        """
        active = self._active_model
        return ActiveModelInfo(
            active_model=active,
            model_info=self.get_record(active) if active else None,
            timestamp=self._clock(),
        )

    async def activate_all(self) -> List[Dict[str, Any]]:
        """
        Activate every catalog model.

        Failures are collected per model rather than raised.

        Returns:
            One result dict per catalog model
        """
        logger.info("Activating all available models")
        results = []

        for model_id in list(self._catalog):
            try:
                result = await self.activate_model(model_id, {})
                results.append(result.model_dump())
                logger.info(f"Model {model_id} activated successfully")
            except ModelNotFoundError as e:
                logger.error(f"Failed to activate model {model_id}: {e.message}")
                results.append({"model_id": model_id, "status": "error", "error": e.message})

        return results
