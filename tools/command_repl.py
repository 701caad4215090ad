#!/usr/bin/env python3
"""
Polymarket Bot - line-based command REPL
========================================
A plain-stdin alternative to the dashboard for querying and controlling
the execution engine.

Commands: /help /currentstate /lastbid /balance /active /markets /pnl
          /pause /resume /panic /exit (/quit)
"""

import asyncio
import logging
from typing import Callable, Optional

from execution.engine import ExecutionEngine, ExecutionError
from storage.watchlist_store import StorageError, WatchlistStore

logger = logging.getLogger("tools.command_repl")

# ==================== ANSI COLORS ====================
RESET = "\033[0m"
BOLD = "\033[1m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
CYAN = "\033[36m"


class CommandRepl:

    def __init__(
        self,
        engine: ExecutionEngine,
        store: Optional[WatchlistStore] = None,
        out: Callable[[str], None] = print,
    ):
        self.engine = engine
        self.store = store
        self.out = out
        self._commands = {
            "/help": self.cmd_help,
            "/currentstate": self.cmd_current_state,
            "/lastbid": self.cmd_last_bid,
            "/balance": self.cmd_balance,
            "/active": self.cmd_active,
            "/markets": self.cmd_markets,
            "/pnl": self.cmd_pnl,
            "/pause": self.cmd_pause,
            "/resume": self.cmd_resume,
            "/panic": self.cmd_panic,
        }

    async def execute(self, line: str) -> bool:
        """Run one line. Returns False when the REPL should exit."""
        command = line.strip().lower()
        if not command:
            return True
        if command in ("/exit", "/quit"):
            self.out("Shutting down...")
            return False

        handler = self._commands.get(command)
        if handler is None:
            self.out(f"{YELLOW}!{RESET} Unknown command. Type {CYAN}/help{RESET} for help.")
            return True

        result = handler()
        if asyncio.iscoroutine(result):
            await result
        return True

    def banner(self) -> None:
        self.out(f"{CYAN}{'=' * 60}{RESET}")
        self.out(f"{CYAN}{BOLD}  Polymarket HFT Bot - Ready{RESET}")
        self.out(f"{CYAN}{'=' * 60}{RESET}")
        self.out(f"Type {CYAN}/help{RESET} for available commands.")
        self.out(f"Type {CYAN}/exit{RESET} to exit.")

    # ------------------------------------------------------------------
    # Information
    # ------------------------------------------------------------------

    def cmd_help(self) -> None:
        self.out(f"{GREEN}{BOLD}Available Commands:{RESET}")
        self.out(f"{YELLOW}Information Commands:{RESET}")
        self.out(f"  {CYAN}/help{RESET}  - Displays this list of commands")
        self.out(f"  {CYAN}/currentstate{RESET}  - Shows engine status")
        self.out(f"  {CYAN}/lastbid{RESET}  - Shows details of the last order placed")
        self.out(f"  {CYAN}/balance{RESET}  - Displays current USDC balance and portfolio value")
        self.out(f"  {CYAN}/active{RESET}  - Lists all currently open orders")
        self.out(f"  {CYAN}/markets{RESET}  - Lists monitored market IDs")
        self.out(f"  {CYAN}/pnl{RESET}  - Shows realized vs unrealized P&L")
        self.out(f"{YELLOW}Control Commands:{RESET}")
        self.out(f"  {CYAN}/pause{RESET}  - Pause new order placement (cancel-only mode)")
        self.out(f"  {CYAN}/resume{RESET}  - Resume normal trading operations")
        self.out(f"  {RED}{BOLD}/panic{RESET}  - EMERGENCY: Cancel all orders and pause")
        self.out(f"  {CYAN}/exit{RESET}  - Exit the bot")

    async def cmd_current_state(self) -> None:
        paused = await self.engine.is_paused()
        status = f"{RED}PAUSED{RESET}" if paused else f"{GREEN}ACTIVE{RESET}"
        self.out(f"{GREEN}{BOLD}System Status:{RESET}")
        self.out(f"  Status: {status}")

    async def cmd_last_bid(self) -> None:
        order_id = await self.engine.get_last_order_id()
        if order_id is None:
            self.out(f"{YELLOW}No orders placed yet.{RESET}")
            return
        self.out(f"{GREEN}{BOLD}Last Order:{RESET}")
        self.out(f"  Order ID: {CYAN}{order_id}{RESET}")

    async def cmd_balance(self) -> None:
        try:
            portfolio = await self.engine.get_portfolio()
        except ExecutionError as e:
            self.out(f"{RED}Error fetching balance:{RESET} {e}")
            return
        self.out(f"{GREEN}{BOLD}Portfolio:{RESET}")
        self.out(f"  USDC Balance: ${portfolio.usdc_balance:.2f}")
        self.out(f"  Total Value: ${portfolio.total_value:.2f}")

    async def cmd_active(self) -> None:
        try:
            orders = await self.engine.get_active_orders()
        except ExecutionError as e:
            self.out(f"{RED}Error fetching orders:{RESET} {e}")
            return
        if not orders:
            self.out(f"{YELLOW}No active orders.{RESET}")
            return
        self.out(f"{GREEN}{BOLD}Active Orders:{RESET} ({len(orders)} total)")
        for o in orders:
            self.out(f"  {o.order_id} | {o.side} | {o.size} @ ${o.price}")

    async def cmd_markets(self) -> None:
        self.out(f"{GREEN}{BOLD}Monitored Markets:{RESET}")
        if self.store is None:
            self.out(f"  {YELLOW}No markets configured yet{RESET}")
            return
        try:
            markets = await self.store.load_active_markets()
        except StorageError as e:
            self.out(f"{RED}Error loading markets:{RESET} {e}")
            return
        if not markets:
            self.out(f"  {YELLOW}No markets configured yet{RESET}")
        for m in markets:
            self.out(f"  {CYAN}{m.id}{RESET} {m.question}")

    async def cmd_pnl(self) -> None:
        try:
            portfolio = await self.engine.get_portfolio()
        except ExecutionError as e:
            self.out(f"{RED}Error fetching P&L:{RESET} {e}")
            return
        total = portfolio.realized_pnl + portfolio.unrealized_pnl
        self.out(f"{GREEN}{BOLD}Profit & Loss:{RESET}")
        self.out(f"  Realized P&L: ${portfolio.realized_pnl:.2f}")
        self.out(f"  Unrealized P&L: ${portfolio.unrealized_pnl:.2f}")
        self.out(f"  Total: ${total:.2f}")

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    async def cmd_pause(self) -> None:
        await self.engine.pause()
        self.out(f"{YELLOW}Bot paused. New orders disabled (cancel-only mode).{RESET}")

    async def cmd_resume(self) -> None:
        await self.engine.resume()
        self.out(f"{GREEN}Bot resumed. Trading enabled.{RESET}")

    async def cmd_panic(self) -> None:
        self.out(f"{RED}{BOLD}PANIC MODE ACTIVATED{RESET}")
        try:
            count = await self.engine.cancel_all_orders()
        except ExecutionError as e:
            self.out(f"{RED}Panic error:{RESET} {e}")
            return
        self.out(f"{RED}Cancelled {count} orders. Bot is now PAUSED.{RESET}")

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        self.banner()
        loop = asyncio.get_running_loop()
        while True:
            try:
                line = await loop.run_in_executor(None, input, "> ")
            except EOFError:
                self.out("Exiting...")
                return
            if not await self.execute(line):
                return
