import pytest
from datetime import date
from unittest.mock import AsyncMock

from attendance_admin.services.dashboard_service import DashboardService


@pytest.mark.asyncio
async def test_stats_fill_missing_strands_and_statuses():
    mock_db_client = AsyncMock()
    mock_db_client.count_students.return_value = 5
    mock_db_client.count_teachers.return_value = 2
    mock_db_client.count_students_by_strand.return_value = {"HUMSS": 3, "ABM": 2}
    mock_db_client.count_attendance_by_status.return_value = {"Present": 4}
    service = DashboardService(db_client=mock_db_client)

    stats = await service.get_stats(today=date(2026, 6, 1))

    mock_db_client.count_attendance_by_status.assert_awaited_once_with(date(2026, 6, 1))
    assert stats == {
        "total_students": 5,
        "total_teachers": 2,
        "strand_counts": {"HUMSS": 3, "ABM": 2, "CSS": 0, "SMAW": 0, "AUTO": 0, "EIM": 0},
        "today_attendance": {"present": 4, "late": 0, "absent": 0},
    }


@pytest.mark.asyncio
async def test_stats_on_empty_database():
    mock_db_client = AsyncMock()
    mock_db_client.count_students.return_value = 0
    mock_db_client.count_teachers.return_value = 0
    mock_db_client.count_students_by_strand.return_value = {}
    mock_db_client.count_attendance_by_status.return_value = {}

    stats = await DashboardService(db_client=mock_db_client).get_stats()

    assert stats["total_students"] == 0
    assert set(stats["strand_counts"].values()) == {0}
    assert stats["today_attendance"] == {"present": 0, "late": 0, "absent": 0}
