from typing import Callable, List, Optional, TextIO, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from harnas.application.dtos import ActionResult, CharacterSnapshotView, GameView
from harnas.application.services.game_service import GameService
from harnas.presentation.menu_controls import numbered_menu


MenuOption = Tuple[str, Optional[Callable[[], ActionResult]]]

_BORDER_STATUS = "yellow"
_BORDER_SCENE = "green"
_BORDER_COMBAT = "red"
_BORDER_SHOP = "bright_yellow"
_BORDER_LOG = "cyan"
_BORDER_WON = "bright_green"
_BORDER_DEAD = "magenta"

_STATUS_STYLES = {
    "unknown": "dim",
    "visited": "green",
    "escaped": "red",
    "current": "bold yellow",
}


def _ornate_title(title: str) -> str:
    core = str(title or "").strip() or "Panel"
    return f"[bold yellow]{core}[/bold yellow]"


def _panel_subtitle(panel_key: str) -> str:
    lookup = {
        "status": "[dim]Record of your climb[/dim]",
        "map": "[dim]The mountain as you know it[/dim]",
        "scene": "[dim]What lies ahead[/dim]",
        "combat": "[dim]Steel and dice[/dim]",
        "shop": "[dim]Wares and weighted coin[/dim]",
        "log": "[dim]Chronicle of the run[/dim]",
    }
    return lookup.get(str(panel_key), "[dim]Highlander's ledger[/dim]")


def render_status(console: Console, character: CharacterSnapshotView) -> None:
    header = Table.grid(padding=(0, 1))
    header.add_column(style="bold yellow", justify="right")
    header.add_column(style="white")
    header.add_row("Highlander", character.name)
    header.add_row("HP", f"{character.hp}/{character.hp_max}")
    header.add_row("Dutki", str(character.coins))
    header.add_row("Points", str(character.points))
    header.add_row("Places", str(character.visited_places_count))
    location = character.current_location + (" (in the Cave)" if character.in_cave else "")
    header.add_row("Location", location)
    inventory = character.inventory
    if inventory is not None:
        gear = [inventory.weapon, f"{inventory.potions} potions"]
        if inventory.has_kaftan:
            gear.append("Kaftan")
        if inventory.has_rope:
            gear.append("Rope")
        if inventory.cap_charges:
            gear.append(f"Invisibility Cap ({inventory.cap_charges})")
        if inventory.has_spirit_heart:
            gear.append("Spirit's Heart")
        if inventory.has_karabela:
            gear.append("Karabela")
        header.add_row("Gear", ", ".join(gear))
        if inventory.scrolls:
            header.add_row("Scrolls", "\n".join(inventory.scrolls))
    if character.advancements:
        header.add_row("Advancements", "\n".join(character.advancements))
    console.print(
        Panel.fit(
            header,
            title=_ornate_title("Status"),
            subtitle=_panel_subtitle("status"),
            subtitle_align="left",
            border_style=_BORDER_STATUS,
        )
    )


def render_map(console: Console, character: CharacterSnapshotView) -> None:
    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column()
    table.add_column()
    for tile in character.map_tiles:
        style = _STATUS_STYLES.get(tile.status, "white")
        table.add_row(f"[{style}]{tile.name}[/{style}]", f"[{style}]{tile.status}[/{style}]")
    console.print(
        Panel.fit(
            table,
            title=_ornate_title("Map"),
            subtitle=_panel_subtitle("map"),
            subtitle_align="left",
            border_style=_BORDER_STATUS,
        )
    )


def render_log(console: Console, view: GameView) -> None:
    rows = list(view.messages[:6])
    for roll in view.dice:
        faces = " + ".join(f"d{sides}:{result}" for sides, result in zip(roll.sides, roll.results))
        rows.append(f"[dim]Dice: {faces} = {roll.total}[/dim]")
    console.print(
        Panel.fit(
            "\n".join(rows) if rows else "No updates.",
            title=_ornate_title("Log"),
            subtitle=_panel_subtitle("log"),
            subtitle_align="left",
            border_style=_BORDER_LOG,
        )
    )


def render_view(console: Console, view: GameView) -> None:
    if view.character is not None:
        render_status(console, view.character)
        render_map(console, view.character)
    if view.scene is not None:
        console.print(
            Panel.fit(
                view.scene.description,
                title=_ornate_title(view.scene.title),
                subtitle=_panel_subtitle("scene"),
                subtitle_align="left",
                border_style=_BORDER_SCENE,
            )
        )
    if view.combat is not None:
        combat = view.combat
        lines = [
            f"[bold]{combat.enemy_name}[/bold]  HP {combat.enemy_hp}/{combat.enemy_hp_max}",
            f"Turn {combat.turn}  Weapon: {combat.weapon_label}",
        ]
        if combat.lore:
            lines.append(f"[italic]{combat.lore}[/italic]")
        if combat.message:
            lines.append(combat.message)
        console.print(
            Panel.fit(
                "\n".join(lines),
                title=_ornate_title("Combat"),
                subtitle=_panel_subtitle("combat"),
                subtitle_align="left",
                border_style=_BORDER_COMBAT,
            )
        )
    if view.shop is not None:
        table = Table(title=f"{view.shop.title} ({view.shop.coins} dutki)")
        table.add_column("Trade")
        table.add_column("Item")
        table.add_column("Price", justify="right")
        for row in view.shop.buy:
            note = f" [dim]{row.availability_note}[/dim]" if row.availability_note else ""
            table.add_row("Buy", f"{row.name}{note}", str(row.price))
        for row in view.shop.sell:
            table.add_row("Sell", row.name, str(row.price))
        console.print(Panel.fit(table, subtitle=_panel_subtitle("shop"), border_style=_BORDER_SHOP))
    render_log(console, view)


def _idle_options(game_service: GameService, character: CharacterSnapshotView) -> List[MenuOption]:
    options: List[MenuOption] = [("Travel", game_service.travel_intent)]
    if character.can_drink_potion:
        options.append(("Drink Potion", game_service.drink_potion_intent))
    if character.can_advance:
        options.append(("Advance (15 points, 12 places)", game_service.advance_intent))
    if character.can_buy_ducat:
        options.append(("Buy Ducat (40 dutki)", game_service.buy_ducat_intent))
    if character.can_use_divination:
        options.append(("Use Divination Sigil", game_service.use_divination_intent))
    return options


def build_menu(game_service: GameService, view: GameView) -> List[MenuOption]:
    """The numbered actions for whatever is on screen; None marks leaving the run."""
    options: List[MenuOption] = []
    if view.phase == "idle" and view.character is not None:
        options.extend(_idle_options(game_service, view.character))
    elif view.phase == "scene" and view.scene is not None:
        for scene_choice in view.scene.choices:
            label = scene_choice.label if scene_choice.enabled else f"{scene_choice.label} (unavailable)"
            options.append((label, lambda index=scene_choice.index: game_service.submit_scene_choice_intent(index)))
        if view.character is not None and view.character.can_drink_potion:
            options.append(("Drink Potion", game_service.drink_potion_intent))
    elif view.phase == "combat" and view.combat is not None:
        combat = view.combat
        options.append(("Attack", lambda: game_service.submit_combat_action_intent("attack")))
        if combat.can_drink_potion:
            options.append(("Drink Potion", lambda: game_service.submit_combat_action_intent("drink_potion")))
        for scroll in combat.scrolls:
            if scroll.enabled:
                options.append(
                    (
                        f"Read {scroll.label}",
                        lambda index=scroll.index: game_service.submit_combat_action_intent("use_scroll", index),
                    )
                )
        if combat.can_avoid:
            options.append(("Avoid (Invisibility Cap)", game_service.avoid_combat_intent))
        options.append((combat.flee_label, lambda: game_service.submit_combat_action_intent("flee")))
    elif view.phase == "shop" and view.shop is not None:
        for row in view.shop.buy:
            if row.can_trade:
                options.append(
                    (f"Buy {row.name} ({row.price})", lambda item_id=row.item_id: game_service.buy_item_intent(item_id))
                )
        for row in view.shop.sell:
            options.append(
                (f"Sell {row.name} ({row.price})", lambda item_id=row.item_id: game_service.sell_item_intent(item_id))
            )
        options.append(("Leave", game_service.leave_shop_intent))
    options.append(("Quit to Menu", None))
    return options


def render_terminal(console: Console, view: GameView) -> None:
    terminal = view.terminal
    border = _BORDER_WON if terminal.outcome == "won" else _BORDER_DEAD
    console.print(
        Panel.fit(
            f"[bold]{terminal.headline}[/bold]\n{terminal.summary}",
            title=_ornate_title("The End"),
            border_style=border,
        )
    )


def report_result(console: Console, result: ActionResult) -> None:
    if result.accepted:
        return
    detail = "; ".join(result.messages) or result.reason.replace("_", " ")
    console.print(f"[red]{detail}[/red]")


def run_game_loop(game_service: GameService, console: Console, stream: Optional[TextIO] = None) -> bool:
    """Drive a run until it ends or the player quits.

    Returns True when the player asks for another run from the end screen.
    """
    while True:
        view = game_service.get_game_view()
        render_view(console, view)
        if view.terminal is not None:
            render_terminal(console, view)
            picked = numbered_menu(console, "The End", [view.terminal.restart_label, "Main Menu"], stream=stream)
            return picked == 0
        options = build_menu(game_service, view)
        picked = numbered_menu(console, "Actions", [label for label, _ in options], stream=stream)
        action = options[picked][1]
        if action is None:
            return False
        report_result(console, action())
