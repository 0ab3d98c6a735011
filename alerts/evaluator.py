# alerts/evaluator.py
"""
Threshold evaluation: turn one weather observation into zero or more alert
candidates. Nothing here touches the database.

Two flavours are supported:
  - evaluate_bands: fixed yellow/orange/red bands for wind and visibility
    (used by the interactive refresh).
  - evaluate_threshold: a user's WeatherThreshold (wind ceiling and
    temperature range), used by the scheduled sweep.

Both add the condition (rain/fog/thunderstorm/snow/hail) rule. Rules are
independent; inside one rule at most one alert is produced.
"""

from dataclasses import dataclass, field

from django.conf import settings

from .models import AlertType, Severity

# confidence for band checks, by severity
BAND_CONFIDENCE = {
    Severity.MEDIUM: 85,
    Severity.HIGH: 90,
    Severity.CRITICAL: 95,
}
MEASURED_CONFIDENCE = 100
SIMULATED_CONFIDENCE = 85

LEVEL_ICONS = {
    Severity.MEDIUM: "🟡",
    Severity.HIGH: "🟠",
    Severity.CRITICAL: "🔴",
}

SEVERE_CONDITIONS = ("thunderstorm", "thunder", "storm", "hail", "fog", "rain", "snow")
STORM_CONDITIONS = ("thunderstorm", "thunder", "storm", "hail")

FOG_VISIBILITY_KM = 3.0
RAIN_WIND_KT = 20.0


@dataclass
class Bands:
    yellow: float
    orange: float
    red: float


@dataclass
class BandThresholds:
    """Wind bands ascend (knots), visibility bands descend (km)."""
    wind: Bands = field(default_factory=lambda: Bands(20.0, 30.0, 40.0))
    visibility: Bands = field(default_factory=lambda: Bands(5.0, 3.0, 1.0))

    def __post_init__(self):
        if not (self.wind.yellow <= self.wind.orange <= self.wind.red):
            raise ValueError(f"wind bands must ascend: {self.wind}")
        if not (self.visibility.yellow >= self.visibility.orange >= self.visibility.red):
            raise ValueError(f"visibility bands must descend: {self.visibility}")

    @classmethod
    def from_settings(cls):
        conf = settings.AIRFIELDWATCH
        wind = conf.get("WIND_BANDS_KT") or {}
        vis = conf.get("VISIBILITY_BANDS_KM") or {}
        return cls(
            wind=Bands(float(wind.get("yellow", 20.0)), float(wind.get("orange", 30.0)), float(wind.get("red", 40.0))),
            visibility=Bands(float(vis.get("yellow", 5.0)), float(vis.get("orange", 3.0)), float(vis.get("red", 1.0))),
        )


DEFAULT_BANDS = BandThresholds()


@dataclass
class AlertCandidate:
    user_id: int
    airfield_id: int
    alert_type: str
    severity: str
    title: str
    message: str
    confidence_score: int
    threshold_value: float = None
    actual_value: float = None

    @property
    def key(self):
        """The tuple the de-duplication step compares on."""
        return (self.user_id, self.airfield_id, str(self.alert_type), str(self.severity))

    def as_model_kwargs(self):
        return {
            "user_id": self.user_id,
            "airfield_id": self.airfield_id,
            "alert_type": str(self.alert_type),
            "severity": str(self.severity),
            "title": self.title,
            "message": self.message,
            "confidence_score": self.confidence_score,
            "threshold_value": self.threshold_value,
            "actual_value": self.actual_value,
        }


def _condition_confidence(observation):
    return SIMULATED_CONFIDENCE if observation.is_simulated else MEASURED_CONFIDENCE


def wind_severity_for_breach(breach):
    """Severity for a wind reading `breach` knots above the user's ceiling."""
    if breach > 20:
        return Severity.CRITICAL
    if breach > 10:
        return Severity.HIGH
    return Severity.MEDIUM


def check_wind_bands(observation, bands, user_id, airfield_id, airfield_code):
    speed = observation.wind_speed
    if speed >= bands.red:
        severity, cutoff = Severity.CRITICAL, bands.red
        title = f"Critical Wind Alert - {airfield_code}"
        tail = "Flight operations severely restricted."
    elif speed >= bands.orange:
        severity, cutoff = Severity.HIGH, bands.orange
        title = f"High Wind Alert - {airfield_code}"
        tail = "Exercise caution for all operations."
    elif speed >= bands.yellow:
        severity, cutoff = Severity.MEDIUM, bands.yellow
        title = f"Wind Caution - {airfield_code}"
        tail = "Monitor closely."
    else:
        return None

    return AlertCandidate(
        user_id=user_id,
        airfield_id=airfield_id,
        alert_type=AlertType.WIND,
        severity=severity,
        title=f"{LEVEL_ICONS[severity]} {title}",
        message=f"Wind {round(speed)} kt from {round(observation.wind_direction)}°. {tail}",
        threshold_value=cutoff,
        actual_value=speed,
        confidence_score=BAND_CONFIDENCE[severity],
    )


def check_visibility_bands(observation, bands, user_id, airfield_id, airfield_code):
    vis = observation.visibility
    if vis < bands.red:
        severity, cutoff = Severity.CRITICAL, bands.red
        title = f"Critical Visibility Alert - {airfield_code}"
        tail = "IFR conditions, visual operations not recommended."
    elif vis < bands.orange:
        severity, cutoff = Severity.HIGH, bands.orange
        title = f"Low Visibility Alert - {airfield_code}"
        tail = "Marginal VFR conditions."
    elif vis < bands.yellow:
        severity, cutoff = Severity.MEDIUM, bands.yellow
        title = f"Visibility Caution - {airfield_code}"
        tail = "Monitor conditions."
    else:
        return None

    return AlertCandidate(
        user_id=user_id,
        airfield_id=airfield_id,
        alert_type=AlertType.VISIBILITY,
        severity=severity,
        title=f"{LEVEL_ICONS[severity]} {title}",
        message=f"Visibility {vis:.1f} km. {tail}",
        threshold_value=cutoff,
        actual_value=vis,
        confidence_score=BAND_CONFIDENCE[severity],
    )


def check_wind_ceiling(observation, ceiling, user_id, airfield_id, airfield_code):
    if ceiling is None or observation.wind_speed <= ceiling:
        return None

    speed = observation.wind_speed
    severity = wind_severity_for_breach(speed - ceiling)
    return AlertCandidate(
        user_id=user_id,
        airfield_id=airfield_id,
        alert_type=AlertType.WIND,
        severity=severity,
        title=f"{severity.upper()} Wind Alert for {airfield_code}",
        message=f"Wind speed at {round(speed)} kt, exceeding your threshold of {ceiling:g} kt.",
        threshold_value=ceiling,
        actual_value=round(speed, 1),
        confidence_score=_condition_confidence(observation),
    )


def check_temperature(observation, minimum, maximum, user_id, airfield_id, airfield_code):
    temp = observation.temperature
    found = []
    if minimum is not None and temp < minimum:
        found.append(AlertCandidate(
            user_id=user_id,
            airfield_id=airfield_id,
            alert_type=AlertType.TEMPERATURE,
            severity=Severity.LOW,
            title=f"Low Temperature Alert ({airfield_code})",
            message=f"Temperature at {round(temp)}°C, below your threshold of {minimum:g}°C.",
            threshold_value=minimum,
            actual_value=round(temp, 1),
            confidence_score=_condition_confidence(observation),
        ))
    if maximum is not None and temp > maximum:
        found.append(AlertCandidate(
            user_id=user_id,
            airfield_id=airfield_id,
            alert_type=AlertType.TEMPERATURE,
            severity=Severity.MEDIUM,
            title=f"High Temperature Alert ({airfield_code})",
            message=f"Temperature at {round(temp)}°C, above your threshold of {maximum:g}°C.",
            threshold_value=maximum,
            actual_value=round(temp, 1),
            confidence_score=_condition_confidence(observation),
        ))
    return found


def condition_severity(conditions, visibility, wind_speed):
    """
    Map condition text to (alert_type, severity), or None when the text has no
    severe-weather keyword. Most specific match wins.
    """
    text = (conditions or "").lower()
    if not any(word in text for word in SEVERE_CONDITIONS):
        return None
    if any(word in text for word in STORM_CONDITIONS):
        return AlertType.STORM, Severity.CRITICAL
    if "fog" in text and visibility is not None and visibility < FOG_VISIBILITY_KM:
        return AlertType.WEATHER, Severity.HIGH
    if "rain" in text and wind_speed is not None and wind_speed > RAIN_WIND_KT:
        return AlertType.WEATHER, Severity.HIGH
    return AlertType.WEATHER, Severity.MEDIUM


def check_conditions(observation, user_id, airfield_id, airfield_code):
    matched = condition_severity(observation.conditions, observation.visibility, observation.wind_speed)
    if matched is None:
        return None

    alert_type, severity = matched
    if alert_type == AlertType.STORM:
        title = f"{LEVEL_ICONS[severity]} Storm Warning - {airfield_code}"
        tail = "Immediate action required."
    else:
        title = f"{LEVEL_ICONS[severity]} Weather Alert - {airfield_code}"
        tail = "Monitor situation closely."

    return AlertCandidate(
        user_id=user_id,
        airfield_id=airfield_id,
        alert_type=alert_type,
        severity=severity,
        title=title,
        message=f"{observation.conditions} reported. {tail}",
        confidence_score=_condition_confidence(observation),
    )


def evaluate_bands(observation, user_id, airfield_id, airfield_code, bands=None):
    """
    Evaluate an observation against fixed wind/visibility bands plus the
    condition rule. Returns a list of AlertCandidate.
    """
    bands = bands or DEFAULT_BANDS
    found = [
        check_wind_bands(observation, bands.wind, user_id, airfield_id, airfield_code),
        check_visibility_bands(observation, bands.visibility, user_id, airfield_id, airfield_code),
        check_conditions(observation, user_id, airfield_id, airfield_code),
    ]
    return [c for c in found if c is not None]


def evaluate_threshold(observation, threshold, airfield_code=None):
    """
    Evaluate an observation against one user's WeatherThreshold. An absent
    or inactive threshold yields no alerts.
    """
    if threshold is None or not threshold.is_active:
        return []

    code = airfield_code or threshold.airfield.code
    user_id, airfield_id = threshold.user_id, threshold.airfield_id

    found = [check_wind_ceiling(observation, threshold.wind_speed_max, user_id, airfield_id, code)]
    found.extend(check_temperature(
        observation, threshold.temperature_min, threshold.temperature_max, user_id, airfield_id, code
    ))
    found.append(check_conditions(observation, user_id, airfield_id, code))
    return [c for c in found if c is not None]
