from __future__ import annotations
import argparse
import json
import sys
from typing import Optional, Dict, Any, List, Tuple

import requests

import config
from feedback import SCORING_GUIDE

# -----------------------------
# Simple HTTP client helpers
# -----------------------------
def _post(base_url: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}{path}"
    r = requests.post(url, json=payload or {}, timeout=60)
    if r.status_code >= 400:
        print(f"\n[CLIENT] HTTP {r.status_code} from {url}")
        try:
            print("[CLIENT] Body:", r.json())
        except ValueError:
            print("[CLIENT] Body:", r.text[:1000])
        r.raise_for_status()
    return r.json()

def _get(base_url: str, path: str) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}{path}"
    r = requests.get(url, timeout=60)
    r.raise_for_status()
    return r.json()

# -----------------------------
# API wrappers
# -----------------------------
def start_session(base_url: str, scoring: str, quantities: str, length: Optional[int]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"scoring_mode": scoring, "quantity_mode": quantities}
    if length:
        payload["session_length"] = length
    return _post(base_url, "/v1/quiz/sessions", payload)

def submit_demand(base_url: str, session_id: str, value: str) -> Dict[str, Any]:
    return _post(base_url, f"/v1/quiz/sessions/{session_id}/demand", {"value": value})

def submit_supply(base_url: str, session_id: str, value: str) -> Dict[str, Any]:
    return _post(base_url, f"/v1/quiz/sessions/{session_id}/supply", {"value": value})

def advance(base_url: str, session_id: str) -> Dict[str, Any]:
    return _post(base_url, f"/v1/quiz/sessions/{session_id}/advance")

def reset(base_url: str, session_id: str) -> Dict[str, Any]:
    return _post(base_url, f"/v1/quiz/sessions/{session_id}/reset")

def get_health(base_url: str) -> Dict[str, Any]:
    return _get(base_url, "/v1/quiz/health")

# -----------------------------
# Pretty printers
# -----------------------------
def print_question(state: Dict[str, Any]) -> None:
    ledger = state["ledger"]
    length = state.get("session_length")
    number = ledger["questions_completed"] + 1
    progress = f"{number}/{length}" if length else f"{number}"
    print(f"\n===== Question {progress}: {state['current_good']['name']} =====")
    if state["scoring_mode"] == "binary":
        print(f"Score: {ledger['total_score']}   Streak: {ledger['streak']}   Best: {ledger['best_streak']}")
    else:
        print(f"Total points: {ledger['total_score']:,}   Average: {ledger['average_points']:,}")

def print_result(res: Dict[str, Any]) -> None:
    print("\n--- Result ---")
    print(f"Demand:     guess {res['demand_guess']:.2f}  actual {res['demand_actual']:.2f}"
          f"  +{res['demand_points']} pts  ({res['demand_feedback']})")
    if res.get("supply_guess") is not None:
        print(f"Supply:     guess {res['supply_guess']:.2f}  actual {res['supply_actual']:.2f}"
              f"  +{res['supply_points']} pts  ({res['supply_feedback']})")
        guess = res.get("incidence_guess")
        actual = res.get("incidence_actual")
        g = f"{guess * 100:.1f}%" if guess is not None else "undefined"
        a = f"{actual * 100:.1f}%" if actual is not None else "undefined"
        print(f"Buyer's share: guess {g}  actual {a}  +{res['incidence_points']} pts")
        if res.get("incidence_narrative"):
            print(res["incidence_narrative"])
    print(f"Question total: {res['total_points']:,} pts   Correct: {'yes' if res['correct'] else 'no'}")

def print_summary(state: Dict[str, Any]) -> None:
    ledger = state["ledger"]
    print("\n===== SESSION COMPLETE =====")
    if ledger.get("max_session_points"):
        print(f"Total score: {ledger['total_score']:,} out of {ledger['max_session_points']:,}")
    else:
        print(f"Total score: {ledger['total_score']}")
    if ledger.get("accuracy_percent") is not None:
        print(f"Accuracy:    {ledger['accuracy_percent']}%")
    for r in ledger["history"]:
        print(f"  Q{r['question_number']}: {r['good']:<28} {r['total_points']:>6,} pts")
    print("=" * 28)

def print_state(state: Dict[str, Any]) -> None:
    print("\n===== SESSION STATE =====")
    print(json.dumps(state, indent=2))
    print("=" * 26)

# -----------------------------
# Interactive play loop
# -----------------------------
def _ask_until_accepted(label: str, submit, base_url: str, session_id: str) -> Dict[str, Any]:
    while True:
        value = input(f"{label}: ").strip()
        state = submit(base_url, session_id, value)
        if state["accepted"]:
            return state
        print("Please enter a number.")

def interactive_play(base_url: str, scoring: str, quantities: str, length: Optional[int]) -> None:
    state = start_session(base_url, scoring, quantities, length)
    sess_id = state["session_id"]
    print(f"\n✅ Session started: {sess_id}")

    while True:
        if state["stage"] == "session_complete":
            print_summary(state)
            if input("Play again? (y/N): ").strip().lower() != "y":
                return
            state = reset(base_url, sess_id)
            continue

        print_question(state)
        state = _ask_until_accepted("Demand elasticity (e.g. -0.45)", submit_demand, base_url, sess_id)
        if state["stage"] == "awaiting_supply_guess":
            state = _ask_until_accepted("Supply elasticity (e.g. 1.2)", submit_supply, base_url, sess_id)
        print_result(state["last_result"])

        if input("\nEnter for next question, q to quit: ").strip().lower() == "q":
            print_state(state)
            return
        state = advance(base_url, sess_id)

# -----------------------------
# Auto-demo play loop
# -----------------------------
def auto_demo_play(base_url: str, scoring: str, quantities: str, length: Optional[int]) -> None:
    """
    Answers every question with the same middle-of-the-road guesses.
    Unbounded (streak) sessions stop after a handful of questions.
    """
    print("\n🤖 Running auto-demo...")
    state = start_session(base_url, scoring, quantities, length)
    sess_id = state["session_id"]
    print(f"✅ Session started: {sess_id}")

    demo_guesses: List[Tuple[str, str]] = [("-0.5", "0.5"), ("-1.2", "1.5"), ("-0.3", "0.2")]
    limit = state.get("session_length") or 5

    for i in range(limit):
        print_question(state)
        demand, supply = demo_guesses[i % len(demo_guesses)]
        state = submit_demand(base_url, sess_id, demand)
        if state["stage"] == "awaiting_supply_guess":
            state = submit_supply(base_url, sess_id, supply)
        print_result(state["last_result"])
        state = advance(base_url, sess_id)

    if state["stage"] == "session_complete":
        print_summary(state)
    else:
        print_state(state)

# -----------------------------
# Run server (programmatically)
# -----------------------------
def run_server(port: int, host: str = "127.0.0.1", reload: bool = True) -> None:
    config.setup_logging()
    try:
        import uvicorn
    except ImportError:
        print("❌ uvicorn not installed. Run: pip install -e .")
        sys.exit(1)
    # api.py configures logging again inside the reload worker
    uvicorn.run("api:app", host=host, port=port, reload=reload, log_level=config.LOG_LEVEL.lower())

# -----------------------------
# Health checker
# -----------------------------
def health_check(base_url: str) -> None:
    print(f"🔎 Checking server at {base_url} ...")
    try:
        data = get_health(base_url)
    except requests.RequestException as e:
        print(f"❌ Health check failed: {e}")
        sys.exit(1)
    if not data["dataset_available"]:
        print(f"❌ Dataset unavailable: {data.get('error')}")
        sys.exit(1)
    print(f"✅ Dataset loaded ({data['goods']} goods)")

# -----------------------------
# CLI
# -----------------------------
def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Elasticity Quiz: server + client in one file")

    sub = p.add_subparsers(dest="cmd", required=True)

    ps = sub.add_parser("serve", help="Start the FastAPI server (uvicorn)")
    ps.add_argument("--port", type=int, default=8000, help="Port to bind")
    ps.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind")
    ps.add_argument("--no-reload", action="store_true", help="Disable auto-reload")

    pp = sub.add_parser("play", help="Play a quiz session (interactive or auto)")
    pp.add_argument("--scoring", choices=["continuous", "binary"], default="continuous",
                    help="Decaying points per question, or correct/incorrect with streaks")
    pp.add_argument("--quantities", choices=["full", "demand_only"], default="full",
                    help="Demand + supply + tax incidence, or demand elasticity only")
    pp.add_argument("--length", type=int, default=None, help="Questions per session")
    pp.add_argument("--base-url", type=str, default=config.DEFAULT_BASE_URL, help="API base URL")
    pp.add_argument("--auto-demo", action="store_true", help="Run a canned demo instead of prompting")

    ph = sub.add_parser("health", help="Check server and dataset availability")
    ph.add_argument("--base-url", type=str, default=config.DEFAULT_BASE_URL, help="API base URL")

    sub.add_parser("rules", help="Print the scoring rules")

    return p.parse_args()

def main() -> None:
    args = parse_args()

    if args.cmd == "serve":
        run_server(port=args.port, host=args.host, reload=(not args.no_reload))
        return

    if args.cmd == "play":
        try:
            get_health(args.base_url)
        except requests.RequestException:
            print("⚠️  Could not reach the server. Is it running?\n"
                  "    Start it in another terminal:\n"
                  "    python main.py serve")
            sys.exit(1)

        if args.auto_demo:
            auto_demo_play(args.base_url, args.scoring, args.quantities, args.length)
        else:
            interactive_play(args.base_url, args.scoring, args.quantities, args.length)
        return

    if args.cmd == "health":
        health_check(args.base_url)
        return

    if args.cmd == "rules":
        print(SCORING_GUIDE)
        return

    print("Unknown command. Try: python main.py --help")
    sys.exit(2)

if __name__ == "__main__":
    main()
