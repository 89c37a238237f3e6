import pytest

from app.dependencies import close_triage_client, get_triage_client


@pytest.mark.asyncio
async def test_triage_client_is_shared_until_closed():
    first = get_triage_client()
    assert get_triage_client() is first

    await close_triage_client()

    second = get_triage_client()
    assert second is not first
    await close_triage_client()
