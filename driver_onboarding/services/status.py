"""
Status projector.

Derives the registration progress view from the stored facts (profile,
current documents, vehicle). Nothing here is persisted and nothing here
touches the database; callers load the facts and pass them in.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, asdict
from typing import Iterable, List, Optional

from ..models.document import REQUIRED_DOCUMENT_TYPES, DriverDocument
from ..models.driver import DriverProfile, DriverStatus
from ..models.vehicle import Vehicle


class Step(str, enum.Enum):
    APPLY        = "apply"
    DOCUMENTS    = "documents"
    VEHICLE      = "vehicle"
    SUBMIT       = "submit"
    VERIFICATION = "verification"


STEP_ORDER = [Step.APPLY, Step.DOCUMENTS, Step.VEHICLE, Step.SUBMIT, Step.VERIFICATION]


@dataclass
class RegistrationStatus:
    driver_id: int
    status: str
    current_step: str
    completed_steps: List[str] = field(default_factory=list)
    missing_items: List[str] = field(default_factory=list)
    next_step: Optional[str] = None
    is_complete: bool = False
    rejection_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def missing_items(documents: Iterable[DriverDocument], vehicle: Optional[Vehicle]) -> List[str]:
    """Required document types without a current entry, then "vehicle" if absent."""
    present = {d.type for d in documents if d.superseded_at is None}
    out = [t.value for t in REQUIRED_DOCUMENT_TYPES if t not in present]
    if vehicle is None:
        out.append("vehicle")
    return out


def project(
    profile: DriverProfile,
    documents: Iterable[DriverDocument],
    vehicle: Optional[Vehicle],
) -> RegistrationStatus:
    documents = [d for d in documents if d.superseded_at is None]
    status = DriverStatus(profile.status)

    completed = [Step.APPLY]
    if documents:
        completed.append(Step.DOCUMENTS)
    if vehicle is not None:
        completed.append(Step.VEHICLE)
    submitted = (
        status.rank >= DriverStatus.PENDING_VERIFICATION.rank
        and status != DriverStatus.DEACTIVATED
        and not profile.has_open_rejection
    )
    if submitted:
        completed.append(Step.SUBMIT)

    if status.is_terminal:
        next_step = None
    else:
        # "verification" is never satisfied here, only the gate resolves it
        next_step = next(s for s in STEP_ORDER[1:] if s not in completed).value

    return RegistrationStatus(
        driver_id=profile.id,
        status=status.value,
        current_step=completed[-1].value,
        completed_steps=[s.value for s in completed],
        missing_items=missing_items(documents, vehicle),
        next_step=next_step,
        is_complete=status == DriverStatus.VERIFIED,
        rejection_reason=profile.rejection_reason if profile.has_open_rejection else None,
    )
