"""CLI helper for running a Coup game in the terminal."""

import sys

from coup.agents import AgentManager, HeuristicAgent
from coup.config_loader import load_config_file
from coup.enums import PlayerType
from coup.interaction import CLIInteraction, run_interactive_game
from coup.logging_manager import LoggingManager


def main() -> None:
    """Run a game from a YAML config; agent seats use the heuristic agent."""
    if len(sys.argv) < 2:
        print("Usage: python run_game.py <config-file>")
        print("Example: python run_game.py config-table.yaml")
        sys.exit(1)

    config_path = sys.argv[1]

    try:
        setup_config = load_config_file(config_path)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error loading config file: {exc}")
        sys.exit(1)

    agent_count = setup_config.agent_count
    human_count = len(setup_config.registrations) - agent_count

    print("\n=== Coup ===")
    print(f"Configuration: {config_path}")
    print(f"Players: {human_count} human, {agent_count} agent")
    print(f"Setting: {setup_config.theme.period}")
    print()

    log_mgr = (
        LoggingManager(enabled=setup_config.enhanced_logging)
        if setup_config.enhanced_logging
        else None
    )
    if log_mgr and log_mgr.enabled:
        print(f"Enhanced logging enabled: {log_mgr.log_dir}")
        print()

    agent_ids = {
        registration.resolved_id(seat)
        for seat, registration in enumerate(setup_config.registrations)
        if registration.player_type is PlayerType.AGENT
    }
    agent_mgr = AgentManager(
        agents={player_id: HeuristicAgent() for player_id in agent_ids},
        logging_manager=log_mgr,
    )

    try:
        result = run_interactive_game(
            setup_config,
            io=CLIInteraction(),
            seed=setup_config.game_config.random_seed,
            agent_manager=agent_mgr,
        )

        print("\n=== Game Complete ===")
        state = result.state
        winner = state.player(state.winner).display_name if state.winner else "Unknown"
        print(f"Winner: {winner}")
        print(f"Turns played: {state.turn_number}")

    except KeyboardInterrupt:
        print("\n\nGame interrupted by user")
        sys.exit(0)
    except Exception as exc:
        print(f"\nError during game: {exc}")
        import traceback

        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
