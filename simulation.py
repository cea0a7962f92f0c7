#!/usr/bin/env python3
"""Title Escrow — End-to-End Simulation.

Simulates four scenarios with SellerBot, BuyerBot, InspectorBot and LenderBot:

    Scenario 1: Happy Path
        - Seller mints, approves and lists a title (price 10, earnest 5)
        - Buyer deposits 5, inspector passes, all three parties approve
        - Lender sends the remaining 5, seller finalizes -> title to buyer

    Scenario 2: Premature Settlement
        - Seller tries to finalize before approvals are in -> rejected
        - Title stays in escrow custody, nothing moves

    Scenario 3: Failed Inspection
        - Inspector fails the property, buyer cancels
        - Earnest deposit refunded to buyer, title back to seller

    Scenario 4: Portfolio Deployment
        - Mint and list three properties with different terms

Usage:
    python simulation.py
    python simulation.py --scenario 1
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from title_escrow.bootstrap import EscrowSystem, deploy
from title_escrow.domain.exceptions import EscrowError
from title_escrow.domain.models import EscrowRoles
from title_escrow.logging_config import get_logger, setup_logging

setup_logging(log_level="INFO", json_logs=False)
logger = get_logger("simulation")

METADATA = "https://ipfs.io/ipfs/QmTudSYeM7mz3PkYEWXWqPjomRPHogcMFSq7XAvsvsgAPS"


# ---------------------------------------------------------------------------
# Bot Agents
# ---------------------------------------------------------------------------
@dataclass
class SellerBot:
    """Simulated seller: lists titles and settles sales."""

    wallet: str = "0x" + "5" * 40

    def approve(self, system: EscrowSystem, title_id: int) -> None:
        system.engine.approve_sale(self.wallet, title_id)
        logger.info("🟠 SELLER: Sale approved", title_id=title_id)

    def finalize(self, system: EscrowSystem, title_id: int) -> None:
        system.engine.finalize_sale(self.wallet, title_id)
        logger.info("🟠 SELLER: Sale finalized", title_id=title_id)


@dataclass
class BuyerBot:
    """Simulated buyer: deposits earnest money, approves or cancels."""

    wallet: str = "0x" + "B" * 40

    def deposit(self, system: EscrowSystem, title_id: int, value: int) -> None:
        balance = system.engine.deposit_earnest(self.wallet, title_id, value)
        logger.info("🔵 BUYER: Earnest deposited", title_id=title_id, deposit_balance=balance)

    def approve(self, system: EscrowSystem, title_id: int) -> None:
        system.engine.approve_sale(self.wallet, title_id)
        logger.info("🔵 BUYER: Sale approved", title_id=title_id)

    def cancel(self, system: EscrowSystem, title_id: int) -> None:
        refund = system.engine.cancel_sale(self.wallet, title_id)
        logger.info("🔵 BUYER: Sale cancelled", title_id=title_id, paid_out=refund)


@dataclass
class InspectorBot:
    """Simulated inspector: attests the property's condition."""

    wallet: str = "0x" + "1" * 40

    def inspect(self, system: EscrowSystem, title_id: int, passed: bool) -> None:
        system.engine.update_inspection_status(self.wallet, title_id, passed)
        verdict = "PASSED ✅" if passed else "FAILED ❌"
        logger.info(f"🟣 INSPECTOR: Inspection {verdict}", title_id=title_id)


@dataclass
class LenderBot:
    """Simulated lender: approves and funds the remainder of the price."""

    wallet: str = "0x" + "7" * 40

    def approve(self, system: EscrowSystem, title_id: int) -> None:
        system.engine.approve_sale(self.wallet, title_id)
        logger.info("🟢 LENDER: Sale approved", title_id=title_id)

    def fund(self, system: EscrowSystem, value: int) -> None:
        balance = system.engine.receive(self.wallet, value)
        logger.info("🟢 LENDER: Funds sent to escrow", amount=value, escrow_balance=balance)


def _parties() -> tuple[SellerBot, BuyerBot, InspectorBot, LenderBot]:
    return SellerBot(), BuyerBot(), InspectorBot(), LenderBot()


def _deploy_single(
    seller: SellerBot,
    buyer: BuyerBot,
    inspector: InspectorBot,
    lender: LenderBot,
    price: int = 10,
    earnest: int = 5,
) -> EscrowSystem:
    roles = EscrowRoles(seller=seller.wallet, inspector=inspector.wallet, lender=lender.wallet)
    system = deploy(roles, buyer.wallet, metadata_locators=[METADATA], terms=[(price, earnest)])
    system.ledger.credit(buyer.wallet, 100)
    system.ledger.credit(lender.wallet, 100)
    return system


class ScenarioFailed(RuntimeError):
    """Raised when a scenario ends in a state other than the one it expects."""


def expect(condition: bool, message: str) -> None:
    """Fail the running scenario unless ``condition`` holds."""
    if not condition:
        raise ScenarioFailed(message)


# ---------------------------------------------------------------------------
# Print helpers
# ---------------------------------------------------------------------------
def banner(text: str) -> None:
    """Print a prominent banner."""
    width = 70
    print("\n" + "=" * width)
    print(f"  {text}")
    print("=" * width + "\n")


def section(text: str) -> None:
    """Print a section header."""
    print(f"\n--- {text} ---\n")


def print_state(system: EscrowSystem, title_id: int) -> None:
    """Pretty-print ownership, listing and balances for one title."""
    engine = system.engine
    owner = system.registry.owner_of(title_id)
    holder = "ESCROW" if owner == engine.address else owner
    print(f"  Owner: {holder}")
    print(f"  Status: {engine.status(title_id)}  (listed: {engine.is_listed(title_id)})")
    print(f"  Deposit: {engine.deposit_balance(title_id)}  Escrow balance: {engine.get_balance()}")
    print(f"  Allowed next: {', '.join(engine.allowed_actions(title_id)) or '—'}")


def print_audit_trail(system: EscrowSystem, title_id: int) -> None:
    """Print the full audit trail for a title."""
    print("\n  📜 Audit Trail:")
    for i, evt in enumerate(system.ledger.events.by_title(title_id), 1):
        print(f"    {i}. [{evt.event_type}] by {evt.actor} {evt.data}")
    print()


# ===========================================================================
# Scenario 1: Happy Path
# ===========================================================================
def scenario_1_happy_path() -> None:
    """All conditions met in order; title and funds settle together."""
    banner("SCENARIO 1: Happy Path — Price 10, Earnest 5")

    seller, buyer, inspector, lender = _parties()
    system = _deploy_single(seller, buyer, inspector, lender)
    title_id = system.title_ids[0]

    section("Step 1: Buyer deposits earnest")
    buyer.deposit(system, title_id, 5)

    section("Step 2: Inspector passes the property")
    inspector.inspect(system, title_id, passed=True)

    section("Step 3: Buyer, seller and lender approve")
    buyer.approve(system, title_id)
    seller.approve(system, title_id)
    lender.approve(system, title_id)

    section("Step 4: Lender funds the remainder")
    lender.fund(system, 5)

    section("Step 5: Seller finalizes")
    seller.finalize(system, title_id)
    print_state(system, title_id)
    expect(system.registry.owner_of(title_id) == buyer.wallet, "title was not delivered to buyer")
    expect(system.engine.get_balance() == 0, "escrow still holds funds after settlement")
    print("  ✅ Title delivered to buyer, seller paid in full")

    print_audit_trail(system, title_id)


# ===========================================================================
# Scenario 2: Premature Settlement
# ===========================================================================
def scenario_2_premature_finalize() -> None:
    """Seller attempts settlement before every party has consented."""
    banner("SCENARIO 2: Premature Settlement — Missing Approvals")

    seller, buyer, inspector, lender = _parties()
    system = _deploy_single(seller, buyer, inspector, lender)
    title_id = system.title_ids[0]

    section("Step 1: Deposit and inspection only")
    buyer.deposit(system, title_id, 5)
    inspector.inspect(system, title_id, passed=True)
    lender.fund(system, 5)

    section("Step 2: Seller tries to finalize")
    try:
        seller.finalize(system, title_id)
    except EscrowError as exc:
        print(f"  🛡️  Rejected [{exc.code}]: {exc.message}")
    print_state(system, title_id)
    expect(
        system.registry.owner_of(title_id) == system.engine.address,
        "title left escrow custody after a rejected finalize",
    )
    print("  ✅ Title still in escrow custody, no funds moved")


# ===========================================================================
# Scenario 3: Failed Inspection
# ===========================================================================
def scenario_3_failed_inspection() -> None:
    """Inspection fails; the buyer walks away with the earnest money."""
    banner("SCENARIO 3: Failed Inspection — Buyer Cancels")

    seller, buyer, inspector, lender = _parties()
    system = _deploy_single(seller, buyer, inspector, lender)
    title_id = system.title_ids[0]

    section("Step 1: Buyer deposits, inspector fails the property")
    buyer.deposit(system, title_id, 5)
    inspector.inspect(system, title_id, passed=False)

    section("Step 2: Buyer cancels")
    buyer.cancel(system, title_id)
    print_state(system, title_id)
    expect(system.registry.owner_of(title_id) == seller.wallet, "title was not returned to seller")
    expect(system.ledger.balance_of(buyer.wallet) == 100, "earnest was not refunded to buyer")
    print("  ✅ Title back with seller, earnest refunded to buyer")

    print_audit_trail(system, title_id)


# ===========================================================================
# Scenario 4: Portfolio Deployment
# ===========================================================================
def scenario_4_portfolio() -> None:
    """Mint and list three properties."""
    banner("SCENARIO 4: Portfolio Deployment — Three Properties")

    seller, buyer, inspector, lender = _parties()
    roles = EscrowRoles(seller=seller.wallet, inspector=inspector.wallet, lender=lender.wallet)
    system = deploy(roles, buyer.wallet)

    print(f"  Registry: {system.registry.address}")
    print(f"  Escrow:   {system.engine.address}\n")
    for title_id in system.title_ids:
        print(
            f"  #{title_id}  price={system.engine.purchase_price(title_id):>3}  "
            f"earnest={system.engine.escrow_amount(title_id):>3}  "
            f"listed={system.engine.is_listed(title_id)}  "
            f"{system.registry.token_uri(title_id)}"
        )


# ===========================================================================
# Main
# ===========================================================================
SCENARIOS = {
    1: scenario_1_happy_path,
    2: scenario_2_premature_finalize,
    3: scenario_3_failed_inspection,
    4: scenario_4_portfolio,
}


def run_all() -> None:
    """Run all scenarios sequentially."""
    print("\n" + "🏠" * 35)
    print("  TITLE ESCROW — SIMULATION")
    print("🏠" * 35 + "\n")

    for scenario in SCENARIOS.values():
        scenario()

    print("\n" + "=" * 70)
    print("  ✅ ALL SCENARIOS COMPLETED SUCCESSFULLY")
    print("=" * 70 + "\n")


def run_scenario(num: int) -> None:
    """Run a specific scenario."""
    if num not in SCENARIOS:
        print(f"Unknown scenario {num}. Available: {', '.join(map(str, SCENARIOS))}")
        return
    SCENARIOS[num]()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Title Escrow Simulation")
    parser.add_argument(
        "--scenario",
        type=int,
        default=0,
        help="Run a specific scenario (1-4). Default: run all.",
    )
    args = parser.parse_args()

    try:
        if args.scenario:
            run_scenario(args.scenario)
        else:
            run_all()
    except ScenarioFailed as exc:
        print(f"\n  ❌ SCENARIO FAILED: {exc}\n")
        raise SystemExit(1) from exc
