"""
Unit tests for the camera permission gate.
"""

import asyncio

import pytest
from unittest.mock import AsyncMock

from herbscan.services.permission import PermissionGate, PermissionResponse, PermissionState


class TestPermissionRequest:
    """Test request() outcomes and prompting rules."""

    @pytest.mark.asyncio
    async def test_initial_state_unknown(self, permission_gate):
        assert permission_gate.current_state() == PermissionState.UNKNOWN

    @pytest.mark.asyncio
    async def test_grant(self, permission_gate, permission_host):
        """Test a granted prompt is remembered and not repeated."""
        assert await permission_gate.request() == PermissionState.GRANTED
        assert await permission_gate.request() == PermissionState.GRANTED
        assert permission_host.prompt_count == 1
        assert permission_gate.current_state() == PermissionState.GRANTED

    @pytest.mark.asyncio
    async def test_denied_then_request_again_reprompts_once(self, host_factory):
        """Test a Denied -> request transition prompts exactly once."""
        host = host_factory(responses=[
            PermissionResponse(granted=False, can_ask_again=True),
            PermissionResponse(granted=True),
        ])
        gate = PermissionGate(host)

        assert await gate.request() == PermissionState.DENIED
        assert await gate.request() == PermissionState.GRANTED
        assert host.prompt_count == 2

    @pytest.mark.asyncio
    async def test_denied_without_ask_again_does_not_prompt(self, host_factory):
        """Test no prompt when the host says asking again is pointless."""
        host = host_factory(responses=[PermissionResponse(granted=False, can_ask_again=False)])
        gate = PermissionGate(host)

        assert await gate.request() == PermissionState.DENIED
        assert await gate.request() == PermissionState.DENIED
        assert host.prompt_count == 1
        assert host.check_count == 1

    @pytest.mark.asyncio
    async def test_denied_without_ask_again_picks_up_settings_change(self, host_factory):
        """Test access granted outside the app is seen without prompting."""
        host = host_factory(responses=[PermissionResponse(granted=False, can_ask_again=False)])
        gate = PermissionGate(host)
        await gate.request()

        host.status = PermissionState.GRANTED

        assert await gate.request() == PermissionState.GRANTED
        assert host.prompt_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_requests_coalesced(self, permission_host, permission_gate):
        """Test concurrent callers share one host prompt."""
        permission_host.gate = asyncio.Event()

        tasks = [asyncio.ensure_future(permission_gate.request()) for _ in range(5)]
        await asyncio.sleep(0)
        permission_host.gate.set()
        results = await asyncio.gather(*tasks)

        assert results == [PermissionState.GRANTED] * 5
        assert permission_host.prompt_count == 1

    @pytest.mark.asyncio
    async def test_host_fault_resolves_to_denied(self):
        """Test a failing host never leaves the state Unknown."""
        host = AsyncMock()
        host.prompt.side_effect = OSError("camera service crashed")
        gate = PermissionGate(host)

        assert await gate.request() == PermissionState.DENIED
        assert gate.current_state() == PermissionState.DENIED
        assert gate.can_ask_again is True


class TestPermissionRefresh:
    """Test refresh() reads status without prompting."""

    @pytest.mark.asyncio
    async def test_refresh_reads_host(self, host_factory):
        host = host_factory(status=PermissionState.GRANTED)
        gate = PermissionGate(host)

        assert await gate.refresh() == PermissionState.GRANTED
        assert host.prompt_count == 0

    @pytest.mark.asyncio
    async def test_refresh_ignores_unknown(self, permission_host, permission_gate):
        await permission_gate.request()
        permission_host.status = PermissionState.UNKNOWN

        assert await permission_gate.refresh() == PermissionState.GRANTED

    @pytest.mark.asyncio
    async def test_refresh_check_failure_keeps_state(self):
        host = AsyncMock()
        host.check.side_effect = RuntimeError("no camera service")
        gate = PermissionGate(host)

        assert await gate.refresh() == PermissionState.UNKNOWN
