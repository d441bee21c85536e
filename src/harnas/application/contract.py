CONTRACT_VERSION = "1.0.0"

COMMAND_INTENTS = (
    "start_run_intent",
    "travel_intent",
    "submit_scene_choice_intent",
    "submit_combat_action_intent",
    "avoid_combat_intent",
    "drink_potion_intent",
    "advance_intent",
    "buy_ducat_intent",
    "buy_item_intent",
    "sell_item_intent",
    "leave_shop_intent",
    "use_divination_intent",
)

QUERY_INTENTS = (
    "get_game_view",
    "get_character_snapshot",
    "get_scene_view",
    "get_combat_view",
    "get_shop_view",
    "get_terminal_view",
    "recent_messages",
    "recent_rolls",
)

CONTRACT_DTO_TYPES = (
    "ActionResult",
    "GameView",
    "CharacterSnapshotView",
    "SceneView",
    "CombatView",
    "ShopView",
    "TerminalView",
    "DiceRollView",
)
