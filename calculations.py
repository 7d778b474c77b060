"""Press run-speed math."""

from numbers import Real


def calculate_run_speed(good_production, production_minutes, logged_downtime_minutes):
    """Sheets per hour over the minutes the press was actually running.

    run_speed = good / (production - downtime) * 60, rounded to 2dp.
    Returns 0.0 for missing inputs or when no running time is left.

    >>> calculate_run_speed(1000, 120, 20)
    600.0
    """
    values = (good_production, production_minutes, logged_downtime_minutes)
    if any(isinstance(v, bool) or not isinstance(v, Real) for v in values):
        return 0.0
    if any(v != v for v in values):  # NaN check
        return 0.0

    running = production_minutes - logged_downtime_minutes
    if running <= 0:
        return 0.0
    return round(good_production / running * 60, 2)
