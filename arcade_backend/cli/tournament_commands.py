"""
Tournament CLI Commands

Ledger tournament operations: status, bootstrap, reconcile, create-successor
"""
import json
import time
import asyncio

from arcade_backend.errors import APIError
from arcade_backend.state_machines.tournament_window import derive_window_state


class TournamentCommand:
    """Tournament CLI command handler."""

    def __init__(self, dry_run: bool = False, services=None):
        self.dry_run = dry_run
        self._services = services

    @property
    def services(self):
        if self._services is None:
            from arcade_backend.config import feature_flags, settings
            from arcade_backend.dependencies import build_services
            self._services = build_services(settings, feature_flags)
        return self._services

    def execute(self, args) -> int:
        """Execute tournament command."""
        if args.tournament_action == "status":
            return self._run(self._async_status(as_json=args.json))
        elif args.tournament_action == "bootstrap":
            return self._run(self._async_write("bootstrap"))
        elif args.tournament_action == "reconcile":
            return self._run(self._async_write("reconcile"))
        elif args.tournament_action == "create-successor":
            return self._run(self._async_write("create_successor"))
        else:
            print("Error: Unknown tournament action")
            return 1

    def _run(self, coro) -> int:
        try:
            return asyncio.run(coro)
        except APIError as e:
            print(f"Error [{e.code}]: {e.message}")
            if e.details:
                print(json.dumps(e.details, indent=2))
            return 1
        except Exception as e:
            print(f"Error: {e}")
            return 1

    async def _async_status(self, as_json: bool = False) -> int:
        tournament = await self.services.reader.current_tournament()
        if tournament is None:
            print("No tournament found - run `arcade tournament bootstrap`")
            return 1

        now = int(time.time())
        state = derive_window_state(now, tournament.start_time, tournament.end_time, tournament.finalized)

        if as_json:
            print(json.dumps({**tournament.to_dict(), "state": state.value}, indent=2))
            return 0

        print("=== Current Tournament ===")
        print(f"ID:            {tournament.id}")
        print(f"State:         {state.value}")
        print(f"Start:         {tournament.start_time}")
        print(f"End:           {tournament.end_time}")
        print(f"Entry fee:     {tournament.entry_fee} wei")
        print(f"Prize pool:    {tournament.prize_pool} wei")
        print(f"Participants:  {tournament.participant_count}")
        if tournament.has_winner:
            print(f"Winner:        {tournament.winner} ({tournament.winning_score})")
        return 0

    async def _async_write(self, operation: str) -> int:
        reconciler = self.services.reconciler

        if self.dry_run:
            tournament = await self.services.reader.current_tournament()
            window = reconciler.successor_window(int(time.time()))
            if tournament is None:
                print("[DRY RUN] No current tournament")
            else:
                state = derive_window_state(
                    int(time.time()), tournament.start_time, tournament.end_time, tournament.finalized
                )
                print(f"[DRY RUN] Tournament {tournament.id} is {state.value}")
            print(f"[DRY RUN] Successor window would be: {json.dumps(window)}")
            return 0

        result = await getattr(reconciler, operation)()
        print(f"✓ {result.message}")
        print(json.dumps(result.to_dict(), indent=2))
        return 0
