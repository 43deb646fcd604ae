"""Tests for NetworkReconciler: switching, adding and chain notifications."""
import asyncio

import pytest

from pyfaucet.core import CORE_TESTNET2
from pyfaucet.core.errors import ProviderRequestError
from pyfaucet.network import NetworkReconciler, NetworkState
from pyfaucet.provider import ProviderAdapter

from tests.mocks import GatedSwitchProvider, LaggingChainIdProvider, MockEthereumProvider, RpcError


def make_reconciler(provider):
    changes = []
    reconciler = NetworkReconciler(ProviderAdapter(provider), CORE_TESTNET2, on_change=lambda: changes.append(1))
    reconciler.attach()
    return reconciler, changes


class TestObserveChain:
    def test_initial_state_unknown(self):
        reconciler, _ = make_reconciler(MockEthereumProvider())
        assert reconciler.state is NetworkState.UNKNOWN
        assert reconciler.active_chain_id is None

    @pytest.mark.asyncio
    async def test_refresh_reads_chain(self):
        reconciler, _ = make_reconciler(MockEthereumProvider(chain_id="0x1"))
        assert await reconciler.refresh() is NetworkState.MISMATCHED
        assert reconciler.active_chain_id == "0x1"

    def test_chain_changed_updates_state(self):
        provider = MockEthereumProvider(chain_id="0x1")
        reconciler, changes = make_reconciler(provider)

        provider.set_chain("0x45A")
        assert reconciler.active_chain_id == "0x45a"
        assert reconciler.is_matched

        provider.set_chain("0x1")
        assert reconciler.active_chain_id == "0x1"
        assert reconciler.state is NetworkState.MISMATCHED
        assert len(changes) == 2

    def test_unparseable_chain_ignored(self):
        provider = MockEthereumProvider(chain_id="0x45a")
        reconciler, _ = make_reconciler(provider)
        reconciler.observe_chain("0x45a")

        provider.emit("chainChanged", "not-a-chain")
        assert reconciler.active_chain_id == "0x45a"
        assert reconciler.is_matched

    def test_detach_stops_updates(self):
        provider = MockEthereumProvider(chain_id="0x1")
        reconciler, _ = make_reconciler(provider)
        reconciler.detach()

        provider.set_chain("0x45a")
        assert reconciler.active_chain_id is None
        assert provider.listener_count("chainChanged") == 0


class TestEnsureTargetNetwork:
    @pytest.mark.asyncio
    async def test_switch_known_chain(self):
        provider = MockEthereumProvider(chain_id="0x1", known_chains=["0x45a"])
        reconciler, _ = make_reconciler(provider)

        state = await reconciler.ensure_target_network()

        assert state is NetworkState.MATCHED
        assert provider.methods() == ["wallet_switchEthereumChain", "eth_chainId"]
        assert provider.calls[0][1] == [{"chainId": "0x45a"}]
        assert reconciler.switching is False
        assert reconciler.switch_attempted is True

    @pytest.mark.asyncio
    async def test_already_on_target_stays_ready(self):
        provider = MockEthereumProvider(chain_id="0x45a")
        reconciler, _ = make_reconciler(provider)
        await reconciler.refresh()
        assert reconciler.is_matched

        await reconciler.ensure_target_network()

        # no chainChanged fires for a no-op switch; the re-read keeps the match
        assert reconciler.is_matched
        assert reconciler.switching is False

    @pytest.mark.asyncio
    async def test_unknown_chain_is_added(self):
        provider = MockEthereumProvider(chain_id="0x1")
        reconciler, _ = make_reconciler(provider)

        state = await reconciler.ensure_target_network()

        assert provider.methods() == ["wallet_switchEthereumChain", "wallet_addEthereumChain", "eth_chainId"]
        assert provider.calls[1][1] == [CORE_TESTNET2.to_add_chain_params()]
        # adding does not imply switching; the wallet is still on 0x1
        assert state is NetworkState.MISMATCHED
        assert reconciler.switch_attempted is True

        provider.set_chain("0x45A")
        assert reconciler.is_matched

    @pytest.mark.asyncio
    async def test_add_then_wallet_switches(self):
        provider = MockEthereumProvider(chain_id="0x1", switch_on_add=True)
        reconciler, _ = make_reconciler(provider)

        assert await reconciler.ensure_target_network() is NetworkState.MATCHED

    @pytest.mark.asyncio
    async def test_switch_is_not_retried_after_add(self):
        provider = MockEthereumProvider(chain_id="0x1")
        reconciler, _ = make_reconciler(provider)

        await reconciler.ensure_target_network()

        assert provider.methods().count("wallet_switchEthereumChain") == 1

    @pytest.mark.asyncio
    async def test_rejected_switch_propagates(self):
        provider = MockEthereumProvider(chain_id="0x1")
        provider.failures["wallet_switchEthereumChain"] = RpcError(4001, "User rejected the request.")
        reconciler, _ = make_reconciler(provider)

        with pytest.raises(ProviderRequestError) as excinfo:
            await reconciler.ensure_target_network()

        assert excinfo.value.code == 4001
        assert "wallet_addEthereumChain" not in provider.methods()
        assert reconciler.switching is False
        assert reconciler.switch_attempted is False

    @pytest.mark.asyncio
    async def test_failed_add_propagates(self):
        provider = MockEthereumProvider(chain_id="0x1")
        provider.failures["wallet_addEthereumChain"] = RpcError(4001, "User rejected the request.")
        reconciler, _ = make_reconciler(provider)

        with pytest.raises(ProviderRequestError):
            await reconciler.ensure_target_network()
        assert reconciler.switching is False

    @pytest.mark.asyncio
    async def test_switching_flag_visible_during_request(self):
        provider = MockEthereumProvider(chain_id="0x1", known_chains=["0x45a"])
        reconciler, _ = make_reconciler(provider)
        seen = []
        provider.on_request = lambda method, params: seen.append((method, reconciler.switching))

        await reconciler.ensure_target_network()

        assert ("wallet_switchEthereumChain", True) in seen
        assert reconciler.switching is False

    @pytest.mark.asyncio
    async def test_chain_changed_before_switch_resolves(self):
        provider = MockEthereumProvider(chain_id="0x1", known_chains=["0x45a"])
        reconciler, _ = make_reconciler(provider)

        def early_notification(method, params):
            if method == "wallet_switchEthereumChain":
                provider.set_chain("0x45a")

        provider.on_request = early_notification

        assert await reconciler.ensure_target_network() is NetworkState.MATCHED
        assert reconciler.active_chain_id == "0x45a"

    @pytest.mark.asyncio
    async def test_user_moves_away_after_switch(self):
        provider = MockEthereumProvider(chain_id="0x1", known_chains=["0x45a"])
        reconciler, _ = make_reconciler(provider)
        await reconciler.ensure_target_network()

        provider.set_chain("0x1")

        assert reconciler.state is NetworkState.MISMATCHED


class TestReadsOvertakenByEvents:
    @pytest.mark.asyncio
    async def test_event_during_read_wins(self):
        provider = LaggingChainIdProvider(chain_id="0x1", moves_to="0x45a")
        reconciler, _ = make_reconciler(provider)

        assert await reconciler.refresh() is NetworkState.MATCHED
        assert reconciler.active_chain_id == "0x45a"

    @pytest.mark.asyncio
    async def test_stale_read_cannot_mark_matched(self):
        provider = LaggingChainIdProvider(chain_id="0x45a", moves_to="0x1")
        reconciler, _ = make_reconciler(provider)

        assert await reconciler.refresh() is NetworkState.MISMATCHED
        assert reconciler.active_chain_id == "0x1"

    @pytest.mark.asyncio
    async def test_later_reads_still_apply(self):
        provider = LaggingChainIdProvider(chain_id="0x1", moves_to="0x45a")
        reconciler, _ = make_reconciler(provider)
        await reconciler.refresh()

        provider.chain_id = "0x1"  # moved without an event
        assert await reconciler.refresh() is NetworkState.MISMATCHED

    @pytest.mark.asyncio
    async def test_user_leaves_target_during_post_switch_read(self):
        provider = LaggingChainIdProvider(chain_id="0x45a", moves_to="0x1")
        reconciler, _ = make_reconciler(provider)

        assert await reconciler.ensure_target_network() is NetworkState.MISMATCHED
        assert reconciler.active_chain_id == "0x1"


class TestOverlappingSwitches:
    @pytest.mark.asyncio
    async def test_switching_until_last_attempt_finishes(self):
        provider = GatedSwitchProvider(chain_id="0x1", known_chains=["0x45a"])
        reconciler, _ = make_reconciler(provider)

        first = asyncio.create_task(reconciler.ensure_target_network())
        second = asyncio.create_task(reconciler.ensure_target_network())
        await provider.wait_for_switches(2)

        provider.gates[0].set()
        await first
        assert reconciler.switching is True

        provider.gates[1].set()
        assert await second is NetworkState.MATCHED
        assert reconciler.switching is False

    @pytest.mark.asyncio
    async def test_failed_attempt_does_not_end_other(self):
        provider = GatedSwitchProvider(chain_id="0x1", known_chains=["0x45a"])
        reconciler, _ = make_reconciler(provider)
        provider.failures["wallet_switchEthereumChain"] = RpcError(4001, "User rejected the request.")

        first = asyncio.create_task(reconciler.ensure_target_network())
        second = asyncio.create_task(reconciler.ensure_target_network())
        await provider.wait_for_switches(2)

        provider.gates[0].set()
        with pytest.raises(ProviderRequestError):
            await first
        assert reconciler.switching is True

        del provider.failures["wallet_switchEthereumChain"]
        provider.gates[1].set()
        await second
        assert reconciler.switching is False
