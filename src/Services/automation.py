# src/Services/automation.py
"""
Automation Decision Engine - threshold rule for AUTO devices.

Responsibilities:
- Decide the desired lamp status from a light reading and the threshold
- Apply the decision to the device ONLY when it differs from the current
  status, appending exactly one AUTO entry to the transition log

Rule:
    desired = ON  if reading >  threshold   (darker than the threshold)
    desired = OFF if reading <= threshold   (equality resolves to OFF)

There is no hysteresis band and no minimum switch interval: readings that
oscillate around the threshold produce one log entry per actual flip.

The engine never reads the threshold itself; the caller passes the value
it just read from system_settings, so retuning takes effect on the next
reading.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from sqlalchemy.orm import Session

from src.Models.device import Device, STATUS_ON, STATUS_OFF, MODE_AUTO
from src.Models.control_log import ControlLog
from src.Repositories import device as device_repo
from src.Repositories import control_log as control_log_repo


def format_number(value: float) -> str:
    """Render 350.0 as '350' and 312.5 as '312.5' in log details."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def decide(reading: float, threshold: float, current_status: Optional[str] = None) -> str:
    """
    Pure decision function.

    current_status does not influence the result; it is accepted so the
    signature mirrors evaluate() and callers can pass the full context.
    """
    return STATUS_ON if reading > threshold else STATUS_OFF


@dataclass(frozen=True)
class AutomationDecision:
    reading: float
    threshold: float
    previous_status: str
    desired_status: str

    @property
    def changed(self) -> bool:
        return self.desired_status != self.previous_status

    @property
    def details(self) -> str:
        comparison = ">" if self.desired_status == STATUS_ON else "<="
        return (
            f"Auto control: light intensity {format_number(self.reading)} "
            f"{comparison} threshold {format_number(self.threshold)}"
        )


class AutomationEngine:
    """
    Stateless engine; one global instance is shared by all requests.
    """

    def evaluate(self, reading: float, threshold: float, current_status: str) -> AutomationDecision:
        return AutomationDecision(
            reading=float(reading),
            threshold=float(threshold),
            previous_status=current_status,
            desired_status=decide(reading, threshold, current_status),
        )

    def apply(
        self,
        db: Session,
        device: Device,
        reading: float,
        threshold: float,
        timestamp: datetime,
    ) -> Tuple[AutomationDecision, Optional[ControlLog]]:
        """
        Evaluate and, if the status must change, write it and log it.

        Must run inside the caller's transaction while the device lock is
        held; nothing is committed here.

        Returns:
            (decision, log entry) where the entry is None when nothing changed
        """
        decision = self.evaluate(reading, threshold, device.status)

        if not decision.changed:
            return decision, None

        device_repo.set_status(db, device, decision.desired_status)
        entry = control_log_repo.append_log(
            db,
            device_ref=device.id,
            action=decision.desired_status,
            mode=MODE_AUTO,
            actor=None,
            details=decision.details,
            timestamp=timestamp,
        )
        return decision, entry


# --------------------------------------------------------
# GLOBAL INSTANCE (Singleton)
# --------------------------------------------------------
automation_engine = AutomationEngine()
