#!/usr/bin/env python3
"""
Polymarket Terminal Dashboard - ANSI renderer
"""
import shutil
import sys
from typing import List

from dashboard.controller import DashboardSnapshot
from dashboard.docs import DOC_SECTIONS
from dashboard.state import (
    CommandEntryMode,
    LeaveConfirmMode,
    LogLevel,
    QuitConfirmMode,
    Selection,
    Tab,
)

# ANSI Colors
C_RESET = "\033[0m"
C_RED = "\033[31m"
C_GREEN = "\033[32m"
C_YELLOW = "\033[33m"
C_CYAN = "\033[36m"
C_MAGENTA = "\033[35m"
C_WHITE = "\033[37m"
C_BOLD = "\033[1m"
C_REVERSE = "\033[7m"

CLEAR = "\033[H\033[2J"

LEVEL_COLORS = {
    LogLevel.INFO: C_WHITE,
    LogLevel.WARNING: C_YELLOW,
    LogLevel.ERROR: C_RED,
    LogLevel.SUCCESS: C_GREEN,
}

TAB_LABELS = ["1:Dashboard", "2:Orders", "3:Markets", "4:Detail", "5:Logs", "6:Docs"]


def get_color_for_velocity(velocity, threshold):
    if abs(velocity) > threshold: return C_RED
    if abs(velocity) > threshold / 2: return C_YELLOW
    return C_GREEN


def get_color_for_obi(obi):
    if obi > 0.3: return C_GREEN
    if obi < -0.3: return C_RED
    return C_WHITE


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: max(0, width - 3)] + "..."


def _header(snap: DashboardSnapshot) -> List[str]:
    status = f"{C_RED}PAUSED{C_RESET}" if snap.is_paused else f"{C_GREEN}ACTIVE{C_RESET}"
    tabs = []
    for tab, label in zip(Tab, TAB_LABELS):
        if tab is snap.current_tab:
            tabs.append(f"{C_REVERSE}{C_BOLD} {label} {C_RESET}")
        else:
            tabs.append(f" {label} ")
    return [
        f"{C_BOLD}{C_CYAN}POLYMARKET HFT BOT{C_RESET} | Status: {status}",
        "".join(tabs),
        "",
    ]


def _market_rows(markets, selected: int, width: int, visible: int) -> List[str]:
    """Rows for the result list, scrolled so the selected row stays on screen."""
    lines = []
    col = max(10, width - 30)
    visible = max(1, visible)
    start = min(max(0, selected - visible + 1), max(0, len(markets) - visible))
    for i, m in enumerate(markets[start:start + visible], start):
        marker = ">" if i == selected else " "
        price = f"{m.prices[0]:.2f}" if m.prices else "-"
        line = f"{marker} {i + 1:>2}. {_truncate(m.question, col):<{col}} {price:>6}  vol {m.volume}"
        lines.append(f"{C_BOLD}{line}{C_RESET}" if i == selected else line)
    return lines


def _dashboard_tab(snap: DashboardSnapshot, width: int) -> List[str]:
    lines = [f"{C_WHITE}--- [ PORTFOLIO ] ---{C_RESET}"]
    p = snap.portfolio
    if p is None:
        lines.append("Loading...")
    else:
        lines.append(f"USDC: ${p.usdc_balance:.2f} | Value: ${p.total_value:.2f}")
        lines.append(f"Realized PnL: ${p.realized_pnl:.2f} | Unrealized PnL: ${p.unrealized_pnl:.2f}")
    lines.append(f"Last Order: {snap.last_order_id or 'None'}")

    lines.append("")
    lines.append(f"{C_WHITE}--- [ WATCHLIST ({len(snap.watched)}) ] ---{C_RESET}")
    if not snap.watched:
        lines.append("No markets joined. Use /join <id|#> or Enter on the Markets tab.")
    for m in snap.watched:
        lines.append(f"  {_truncate(m.question, width - 4)}")
    return lines


def _orders_tab(snap: DashboardSnapshot, width: int) -> List[str]:
    lines = [f"{C_WHITE}--- [ ACTIVE ORDERS ] ---{C_RESET}"]
    if not snap.active_orders:
        lines.append("No active orders")
        return lines
    lines.append(f"{'ORDER':<22} {'MARKET':<20} {'SIDE':<5} {'PRICE':>7} {'SIZE':>8} {'FILLED':>8}")
    lines.append("-" * min(width, 76))
    for o in snap.active_orders:
        lines.append(
            f"{o.order_id:<22} {_truncate(o.market_id, 20):<20} {o.side:<5} "
            f"{o.price:>7.3f} {o.size:>8.2f} {o.filled_size:>8.2f}"
        )
    return lines


def _markets_tab(snap: DashboardSnapshot, width: int, height: int) -> List[str]:
    title = snap.search_query or "Markets"
    lines = [f"{C_WHITE}--- [ {title.upper()} ] ---{C_RESET}"]
    if snap.is_loading:
        lines.append(f"{C_YELLOW}Loading...{C_RESET}")
    elif not snap.available_markets:
        lines.append("No markets. Press S to search or T for trending.")
    else:
        rows = _market_rows(snap.available_markets, snap.selected_market_index, width, height - 3)
        lines.extend(rows)
        lines.append("")
        lines.append(f"{C_CYAN}Enter: join selected | Up/Down: navigate{C_RESET}")
    return lines


def _detail_tab(snap: DashboardSnapshot, width: int) -> List[str]:
    lines = [f"{C_WHITE}--- [ MARKET DETAIL ] ---{C_RESET}"]
    if not snap.watched:
        lines.append("No markets joined.")
        return lines

    for i, m in enumerate(snap.watched):
        marker = ">" if i == snap.selected_watched_index else " "
        lines.append(f"{marker} {_truncate(m.question, width - 2)}")

    selected = snap.watched[min(snap.selected_watched_index, len(snap.watched) - 1)]
    view = snap.analysis.get(selected.id)
    lines.append("")
    lines.append(f"{C_BOLD}{selected.id}{C_RESET}")
    if view is None or view.current_velocity is None:
        lines.append("Collecting data...")
    else:
        v_col = get_color_for_velocity(view.current_velocity, snap.velocity_threshold)
        lines.append(f"Volume Velocity: {v_col}{view.current_velocity:+.1f} vol/s{C_RESET}")
        if view.current_obi is not None:
            o_col = get_color_for_obi(view.current_obi)
            flag = " (SIGNIFICANT)" if view.significant_imbalance else ""
            lines.append(f"OBI: {o_col}{view.current_obi:+.3f}{flag}{C_RESET}")
        if view.recent_events:
            lines.append("Recent spikes:")
            for ev in view.recent_events:
                lines.append(f"  {ev.timestamp}  {ev.velocity:+.1f} vol/s  ({ev.volume_delta:+.0f})")
    lines.append("")
    lines.append(f"{C_CYAN}Del/Backspace: leave selected market{C_RESET}")
    return lines


def _logs_tab(snap: DashboardSnapshot, height: int) -> List[str]:
    lines = [f"{C_WHITE}--- [ LOGS ] ---{C_RESET}"]
    for entry in snap.logs[-height:]:
        col = LEVEL_COLORS[entry.level]
        lines.append(f"{entry.timestamp} {col}{entry.level.value:<7}{C_RESET} {entry.message}")
    return lines


def _docs_tab(snap: DashboardSnapshot, height: int) -> List[str]:
    section = DOC_SECTIONS[snap.docs_selected_section]
    if snap.docs_viewing_content:
        lines = [f"{C_BOLD}{section.title}{C_RESET}", ""]
        lines.extend(section.body[snap.docs_scroll_offset: snap.docs_scroll_offset + height])
        lines.append("")
        lines.append(f"{C_CYAN}Up/Down: scroll | Left/Esc: back{C_RESET}")
        return lines

    lines = [f"{C_WHITE}--- [ DOCUMENTATION ] ---{C_RESET}"]
    for i, s in enumerate(DOC_SECTIONS):
        if i == snap.docs_selected_section:
            lines.append(f"{C_BOLD}> {s.title}{C_RESET}")
            lines.extend(f"    {p}" for p in s.preview)
        else:
            lines.append(f"  {s.title}")
    lines.append("")
    lines.append(f"{C_CYAN}Up/Down: select | Enter: read{C_RESET}")
    return lines


def _footer(snap: DashboardSnapshot) -> List[str]:
    mode = snap.mode
    if isinstance(mode, CommandEntryMode):
        return [f"{C_BOLD}:{C_RESET}{mode.buffer}_"]
    if isinstance(mode, (QuitConfirmMode, LeaveConfirmMode)):
        question = "Quit?" if isinstance(mode, QuitConfirmMode) else "Leave selected market?"
        yes = f"{C_REVERSE} Yes {C_RESET}" if mode.selection is Selection.YES else " Yes "
        no = f"{C_REVERSE} No {C_RESET}" if mode.selection is Selection.NO else " No "
        return [f"{C_YELLOW}{question}{C_RESET} {yes} {no}  (Left/Right toggle, Enter confirm, Esc cancel)"]
    return [f"{C_CYAN}: command | S search | T trending | P pause | R resume | ! panic | H help | Q quit{C_RESET}"]


def render_lines(snap: DashboardSnapshot, width: int = 80, height: int = 24) -> List[str]:
    """Render one frame as a list of lines."""
    body_height = max(1, height - 6)
    lines = _header(snap)

    tab = snap.current_tab
    if tab is Tab.DASHBOARD:
        body = _dashboard_tab(snap, width)
    elif tab is Tab.ORDERS:
        body = _orders_tab(snap, width)
    elif tab is Tab.MARKETS:
        body = _markets_tab(snap, width, body_height)
    elif tab is Tab.MARKET_DETAIL:
        body = _detail_tab(snap, width)
    elif tab is Tab.LOGS:
        body = _logs_tab(snap, body_height - 1)
    else:
        body = _docs_tab(snap, body_height - 4)

    lines.extend(body[:body_height])
    lines.append("")
    lines.extend(_footer(snap))
    return lines


def draw_dashboard(snap: DashboardSnapshot) -> None:
    """Clear the screen and draw one frame. Raw mode needs explicit CR."""
    size = shutil.get_terminal_size((80, 24))
    frame = "\r\n".join(render_lines(snap, size.columns, size.lines))
    sys.stdout.write(CLEAR + frame)
    sys.stdout.flush()
