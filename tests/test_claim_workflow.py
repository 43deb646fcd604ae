"""Tests for FaucetContract and ClaimWorkflow."""
import asyncio

import pytest
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from pyfaucet.claim import ClaimReceipt, ClaimStatus, FaucetContract
from pyfaucet.core import FAUCET_ADDRESS
from pyfaucet.core.errors import (
    ClaimInProgressError,
    ConfirmationError,
    NotConnectedError,
    ProviderRequestError,
    SubmissionError,
    WrongNetworkError,
)
from pyfaucet.provider import ProviderAdapter

from tests.factories import make_provider_on_target, make_workflow
from tests.mocks import ACCOUNT, TX_HASH, MockEthereumProvider, RpcError


async def ready_workflow(provider, on_change=None):
    workflow = make_workflow(provider, on_change)
    await workflow.session.start()
    await workflow.session.connect()
    provider.reset_calls()
    return workflow


class TestFaucetContract:
    def test_calldata_is_selector(self):
        contract = FaucetContract(ProviderAdapter(MockEthereumProvider()), FAUCET_ADDRESS.lower())
        assert contract.address == to_checksum_address(FAUCET_ADDRESS)
        assert contract.calldata == "0x" + function_signature_to_4byte_selector("faucet()").hex()
        assert len(contract.calldata) == 10

    @pytest.mark.asyncio
    async def test_submit_sends_from_account(self):
        provider = MockEthereumProvider()
        contract = FaucetContract(ProviderAdapter(provider), FAUCET_ADDRESS, poll_interval=0)

        assert await contract.submit(ACCOUNT) == TX_HASH
        method, params = provider.calls[0]
        assert method == "eth_sendTransaction"
        assert params == [{"from": ACCOUNT, "to": contract.address, "data": contract.calldata}]

    @pytest.mark.asyncio
    async def test_submit_rejects_bad_hash(self):
        provider = MockEthereumProvider(tx_hash="nope")
        contract = FaucetContract(ProviderAdapter(provider), FAUCET_ADDRESS, poll_interval=0)
        with pytest.raises(ProviderRequestError, match="Invalid transaction hash"):
            await contract.submit(ACCOUNT)

    @pytest.mark.asyncio
    async def test_wait_polls_until_mined(self):
        provider = MockEthereumProvider(pending_receipts=3)
        contract = FaucetContract(ProviderAdapter(provider), FAUCET_ADDRESS, poll_interval=0)

        receipt = await contract.wait_for_receipt(TX_HASH)

        assert receipt == ClaimReceipt(tx_hash=TX_HASH, block_number=16, status=1)
        assert provider.methods().count("eth_getTransactionReceipt") == 4

    @pytest.mark.asyncio
    async def test_wait_reverted(self):
        provider = MockEthereumProvider(receipt_status="0x0")
        contract = FaucetContract(ProviderAdapter(provider), FAUCET_ADDRESS, poll_interval=0)
        with pytest.raises(ConfirmationError, match="reverted") as excinfo:
            await contract.wait_for_receipt(TX_HASH)
        assert excinfo.value.tx_hash == TX_HASH

    @pytest.mark.asyncio
    async def test_wait_times_out(self):
        provider = MockEthereumProvider(pending_receipts=10**6)
        contract = FaucetContract(ProviderAdapter(provider), FAUCET_ADDRESS, poll_interval=0, timeout=0)
        with pytest.raises(ConfirmationError, match="Timed out"):
            await contract.wait_for_receipt(TX_HASH)


class TestClaimWorkflow:
    @pytest.mark.asyncio
    async def test_claim_success(self):
        provider = make_provider_on_target()
        workflow = await ready_workflow(provider)
        seen = []
        provider.on_request = lambda method, params: seen.append(
            (method, workflow.current.status, workflow.current.hash)
        )

        tx = await workflow.submit_claim()

        assert tx.status is ClaimStatus.SUCCESS
        assert tx.hash == TX_HASH
        assert tx.block_number == 16
        assert tx.is_terminal
        assert workflow.busy is False
        # the hash is recorded before the confirmation wait begins
        assert seen[0] == ("eth_sendTransaction", ClaimStatus.PENDING, None)
        assert seen[1] == ("eth_getTransactionReceipt", ClaimStatus.PENDING, TX_HASH)

    @pytest.mark.asyncio
    async def test_hash_published_before_confirmation(self):
        provider = make_provider_on_target(pending_receipts=2)
        snapshots = []

        def on_change():
            tx = workflow.current
            if tx is not None:
                snapshots.append((tx.status, tx.hash))

        workflow = await ready_workflow(provider, on_change)
        await workflow.submit_claim()

        assert (ClaimStatus.PENDING, None) in snapshots
        assert (ClaimStatus.PENDING, TX_HASH) in snapshots
        assert snapshots.index((ClaimStatus.PENDING, TX_HASH)) < snapshots.index((ClaimStatus.SUCCESS, TX_HASH))

    @pytest.mark.asyncio
    async def test_not_connected_makes_no_request(self):
        provider = make_provider_on_target()
        workflow = make_workflow(provider)
        await workflow.session.start()
        provider.reset_calls()

        with pytest.raises(NotConnectedError):
            await workflow.submit_claim()

        assert provider.calls == []
        assert workflow.current is None
        assert workflow.busy is False

    @pytest.mark.asyncio
    async def test_wrong_network_makes_no_request(self):
        provider = make_provider_on_target()
        workflow = await ready_workflow(provider)
        provider.set_chain("0x1")
        provider.reset_calls()

        with pytest.raises(WrongNetworkError) as excinfo:
            await workflow.submit_claim()

        assert provider.calls == []
        assert excinfo.value.expected_chain_id == "0x45a"
        assert excinfo.value.actual_chain_id == "0x1"
        assert excinfo.value.user_message == "Please switch to Core Testnet 2 to claim tokens."

    @pytest.mark.asyncio
    async def test_refused_claim_keeps_previous_transaction(self):
        provider = make_provider_on_target()
        workflow = await ready_workflow(provider)
        confirmed = await workflow.submit_claim()
        provider.set_chain("0x1")

        with pytest.raises(WrongNetworkError):
            await workflow.submit_claim()

        assert workflow.current is confirmed
        assert confirmed.status is ClaimStatus.SUCCESS
        assert workflow.busy is False

    @pytest.mark.asyncio
    async def test_user_rejects_signing(self):
        provider = make_provider_on_target()
        provider.failures["eth_sendTransaction"] = RpcError(4001, "User rejected the request.")
        workflow = await ready_workflow(provider)

        with pytest.raises(SubmissionError) as excinfo:
            await workflow.submit_claim()

        assert excinfo.value.user_message == "User rejected the request."
        assert isinstance(excinfo.value.cause, ProviderRequestError)
        assert workflow.current.status is ClaimStatus.ERROR
        assert workflow.current.error_detail == "User rejected the request."
        assert workflow.current.hash is None
        assert workflow.busy is False

    @pytest.mark.asyncio
    async def test_revert_keeps_hash(self):
        provider = make_provider_on_target(receipt_status="0x0")
        workflow = await ready_workflow(provider)

        with pytest.raises(ConfirmationError):
            await workflow.submit_claim()

        assert workflow.current.status is ClaimStatus.ERROR
        assert workflow.current.hash == TX_HASH
        assert workflow.current.error_detail == "Transaction reverted"
        assert workflow.busy is False

    @pytest.mark.asyncio
    async def test_receipt_lookup_failure_is_confirmation_error(self):
        provider = make_provider_on_target()
        provider.failures["eth_getTransactionReceipt"] = RpcError(-32603, "Internal error")
        workflow = await ready_workflow(provider)

        with pytest.raises(ConfirmationError) as excinfo:
            await workflow.submit_claim()

        assert excinfo.value.tx_hash == TX_HASH
        assert workflow.current.hash == TX_HASH

    @pytest.mark.asyncio
    async def test_second_claim_while_pending(self):
        provider = make_provider_on_target()
        workflow = await ready_workflow(provider)
        gate = asyncio.Event()
        real_wait = workflow.contract.wait_for_receipt

        async def blocked_wait(tx_hash):
            await gate.wait()
            return await real_wait(tx_hash)

        workflow.contract.wait_for_receipt = blocked_wait
        first = asyncio.create_task(workflow.submit_claim())
        while workflow.current is None or workflow.current.hash is None:
            await asyncio.sleep(0)
        pending = workflow.current

        assert workflow.busy is True
        with pytest.raises(ClaimInProgressError):
            await workflow.submit_claim()
        assert workflow.current is pending

        gate.set()
        tx = await first
        assert tx.status is ClaimStatus.SUCCESS
        assert workflow.busy is False
        assert provider.methods().count("eth_sendTransaction") == 1

    @pytest.mark.asyncio
    async def test_each_attempt_is_fresh(self):
        provider = make_provider_on_target()
        provider.failures["eth_sendTransaction"] = RpcError(4001, "User rejected the request.")
        workflow = await ready_workflow(provider)

        with pytest.raises(SubmissionError):
            await workflow.submit_claim()
        failed = workflow.current

        del provider.failures["eth_sendTransaction"]
        tx = await workflow.submit_claim()

        assert tx is not failed
        assert tx.status is ClaimStatus.SUCCESS
        assert tx.error_detail is None
