from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from session_booking.core.deps import get_db
from session_booking.core.errors import ConfigurationError
from session_booking.core.permissions import require_instructor
from session_booking.models.course import Course
from session_booking.models.setting import PluginSetting
from session_booking.models.user import User
from session_booking.schemas.settings import (
    EffectiveWeights,
    LifecycleRunRead,
    WeightSettings,
    WeightSettingsRead,
)
from session_booking.services.lifecycle import run_lifecycle
from session_booking.services.metrics import SqlMetricsProvider, parse_weight
from session_booking.services.notifications import Notifier, get_notifier
from session_booking.services.priority import load_weight_config

router = APIRouter()


def _weights_view(db: Session) -> WeightSettingsRead:
    stored = {}
    for name in WeightSettings.model_fields:
        setting = db.get(PluginSetting, name)
        stored[name] = setting.value if setting else None

    weights = load_weight_config(SqlMetricsProvider(db, datetime.now(timezone.utc)))
    return WeightSettingsRead(
        stored=WeightSettings(**stored),
        effective=EffectiveWeights(
            recency_weight=weights.recency_weight,
            slot_weight=weights.slot_weight,
            activity_weight=weights.activity_weight,
            completion_weight=weights.completion_weight,
        ),
    )


@router.get("/settings/weights", response_model=WeightSettingsRead)
def get_weights(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    return _weights_view(db)


@router.put("/settings/weights", response_model=WeightSettingsRead)
def put_weights(
    payload: WeightSettings,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_instructor),
):
    for name, raw in payload.model_dump(exclude_unset=True).items():
        try:
            parse_weight(name, raw)
        except ConfigurationError as exc:
            raise HTTPException(status_code=422, detail=str(exc))

        setting = db.get(PluginSetting, name)
        if raw is None or not raw.strip():
            if setting is not None:
                db.delete(setting)
        elif setting is None:
            db.add(PluginSetting(name=name, value=raw.strip()))
        else:
            setting.value = raw.strip()

    db.commit()
    return _weights_view(db)


@router.post("/courses/{course_id}/lifecycle/run", response_model=LifecycleRunRead)
def run_course_lifecycle(
    course_id: int,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    current_user: User = Depends(require_instructor),
):
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise HTTPException(status_code=404, detail="Course not found")
    if course.instructor_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not course instructor")

    applied = run_lifecycle(db, course, notifier, datetime.now(timezone.utc))
    return LifecycleRunRead(
        course_id=course.id,
        actions=[{"user_id": uid, "action": action.value} for uid, action in applied],
    )
