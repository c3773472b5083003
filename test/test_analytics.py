from datetime import date, datetime

from fueldrop.analytics import sales_windows, success_rate


def test_sales_windows_are_calendar_dates_from_now():
    today, week_start, month_start = sales_windows(datetime(2026, 3, 5, 0, 30))
    assert today == date(2026, 3, 5)
    assert week_start == date(2026, 2, 26)
    assert month_start == date(2026, 2, 3)


def test_success_rate():
    assert success_rate(0, 0) == 0
    assert success_rate(2, 3) == 67
    assert success_rate(5, 5) == 100
