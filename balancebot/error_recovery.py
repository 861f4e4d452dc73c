"""Component start-up with retries, failure handling and safe mode."""

from __future__ import annotations

import dataclasses
import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from balancebot import settings

_log = logging.getLogger(__name__)

MAX_REGISTERED_COMPONENTS = 10


class SafeModeRestart(Exception):
    """Raised when safe mode is entered and the system must restart."""


class ComponentPriority(enum.IntEnum):
    """How much the system depends on a component."""

    CRITICAL = 0
    IMPORTANT = 1
    OPTIONAL = 2


@dataclass
class Component:
    """A named component and the callable that brings it up.

    ``init_func`` signals failure by raising an exception.
    """

    name: str
    init_func: Optional[Callable[[], object]]
    priority: ComponentPriority
    initialized: bool = False
    retry_count: int = 0


class ErrorRecovery:
    """Initialises components with retries and reacts to their failure."""

    def __init__(
        self,
        max_retries: int = settings.MAX_INIT_RETRIES,
        retry_delay_ms: int = settings.ERROR_RECOVERY_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self._sleep = sleep
        self.components: list[Component] = []
        self.safe_mode_active = False
        _log.info("Error recovery system initialized")

    def initialize_with_retry(self, component: Component) -> bool:
        """Try to initialise ``component``; return whether it came up.

        A critical component that never comes up triggers safe mode,
        which raises :class:`SafeModeRestart`.
        """
        if component is None or component.init_func is None:
            raise ValueError("Invalid component configuration")

        _log.info("Initializing component: %s", component.name)
        for attempt in range(self.max_retries):
            try:
                component.init_func()
            except Exception as exc:  # any failure of the init callable
                _log.warning(
                    "%s initialization failed (attempt %d/%d): %s",
                    component.name,
                    attempt + 1,
                    self.max_retries,
                    exc,
                )
                if attempt < self.max_retries - 1:
                    self._sleep(self.retry_delay_ms / 1000.0)
                continue

            component.initialized = True
            component.retry_count = attempt
            _log.info("Component %s initialized successfully", component.name)
            if len(self.components) < MAX_REGISTERED_COMPONENTS:
                self.components.append(dataclasses.replace(component))
            return True

        component.initialized = False
        component.retry_count = self.max_retries
        self.handle_failure(component)
        return False

    def handle_failure(self, component: Component) -> None:
        """React to a failed component according to its priority."""
        _log.error(
            "Component %s failed after %d retries",
            component.name,
            component.retry_count,
        )
        if component.priority is ComponentPriority.CRITICAL:
            _log.error(
                "Critical component %s failed - entering safe mode", component.name
            )
            self.enter_safe_mode()
        elif component.priority is ComponentPriority.IMPORTANT:
            _log.warning(
                "Important component %s failed - continuing with limited functionality",
                component.name,
            )
        else:
            _log.info(
                "Optional component %s failed - continuing normally", component.name
            )

    def is_operational(self, name: str) -> bool:
        """Return whether a registered component of that name is up."""
        for component in self.components:
            if component.name == name:
                return component.initialized
        return False

    def enter_safe_mode(self) -> None:
        """Log health, wait the recovery delay and raise :class:`SafeModeRestart`."""
        self.safe_mode_active = True
        _log.error(
            "ENTERING SAFE MODE - System will restart in %d seconds",
            self.retry_delay_ms // 1000,
        )
        self.health_report()
        self._sleep(self.retry_delay_ms / 1000.0)
        _log.error("Restarting system...")
        raise SafeModeRestart("safe mode entered; system restart required")

    def health_report(self) -> list[str]:
        """Return (and log) the lines of the system health report."""
        lines = [
            "=== SYSTEM HEALTH REPORT ===",
            f"Safe mode active: {'YES' if self.safe_mode_active else 'NO'}",
            f"Total components: {len(self.components)}",
        ]
        lines.extend(
            f"Component {c.name}: {'OK' if c.initialized else 'FAILED'} "
            f"(retries: {c.retry_count}, priority: {int(c.priority)})"
            for c in self.components
        )
        lines.append("========================")
        for line in lines:
            _log.info("%s", line)
        return lines