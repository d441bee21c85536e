from pathlib import Path
import logging
import sys

from dotenv import load_dotenv

# Ensure the src directory is on sys.path when running as a script
_SRC_DIR = Path(__file__).resolve().parents[1]
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from harnas.bootstrap import create_game_service, log_level_from_env
from harnas.presentation.main_menu import main_menu


def _print_help_surface() -> None:
    print("\nHelp:")
    print("- Main menu: type the number of an option and press ENTER.")
    print("- In game: Travel to roll the next location, or answer the numbered choices on screen.")
    print("- Startup issues: check HARNAS_SEED, HARNAS_ROLL_DELAY_S and the other HARNAS_* values in your .env file.")


def main():
    load_dotenv()
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        game_service = create_game_service()
        main_menu(game_service)
    except KeyboardInterrupt:
        print("\nSession ended.")
    except Exception as exc:
        print("An unexpected error occurred. The game closed safely.")
        print(f"Reason: {exc}")
        _print_help_surface()


if __name__ == "__main__":
    main()
