# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Demo-data seeder — fills a running service with teams and pull requests
through its public HTTP API.

Run:  python -m reviewer_assignment.seeder --teams 20 --members 10 --pull-requests 50
"""
import argparse
import random
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from reviewer_assignment.core.config import settings
from reviewer_assignment.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SeedReport:
    teams_created: int = 0
    pull_requests_created: int = 0
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class Seeder:
    def __init__(self, client: httpx.Client, rng: Optional[random.Random] = None):
        self._client = client
        self._rng = rng or random.Random()

    def wait_until_ready(self, attempts: int = 60, delay: float = 1.0) -> bool:
        for attempt in range(1, attempts + 1):
            try:
                resp = self._client.get("/health")
                if resp.status_code == 200:
                    return True
            except httpx.HTTPError as exc:
                logger.debug("Service not ready (attempt %d): %s", attempt, exc)
            if attempt < attempts:
                time.sleep(delay)
        return False

    def seed(self, teams: int, members: int, pull_requests: int) -> SeedReport:
        report = SeedReport()
        users: List[str] = []

        for i in range(1, teams + 1):
            team_members = [
                {"user_id": f"u_{i}_{j}", "username": f"User {i}-{j}", "is_active": True}
                for j in range(1, members + 1)
            ]
            if self._post("/team/add", {"team_name": f"team_{i}", "members": team_members}, report):
                report.teams_created += 1
            users.extend(m["user_id"] for m in team_members)

        for i in range(1, pull_requests + 1):
            if not users:
                break
            payload = {
                "pull_request_id": f"pr_seed_{i}",
                "pull_request_name": f"Feature {i}",
                "author_id": self._rng.choice(users),
            }
            if self._post("/pullRequest/create", payload, report):
                report.pull_requests_created += 1

        logger.info(
            "Seeding finished: teams=%d, pull_requests=%d, failures=%d",
            report.teams_created, report.pull_requests_created, len(report.failures),
        )
        return report

    def _post(self, path: str, payload: Dict[str, Any], report: SeedReport) -> bool:
        try:
            resp = self._client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("POST %s failed: %s", path, exc)
            report.failures.append(f"{path}: {exc}")
            return False
        if resp.status_code != 201:
            logger.warning("POST %s returned status %d", path, resp.status_code)
            report.failures.append(f"{path}: HTTP {resp.status_code}")
            return False
        return True


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the reviewer assignment service with demo data.")
    parser.add_argument("--base-url", default=settings.SEEDER_BASE_URL)
    parser.add_argument("--teams", type=int, default=20)
    parser.add_argument("--members", type=int, default=10)
    parser.add_argument("--pull-requests", type=int, default=50)
    parser.add_argument("--seed", type=int, default=None, help="random seed for author choice")
    parser.add_argument("--wait", type=int, default=60, help="readiness attempts, one per second")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    with httpx.Client(base_url=args.base_url, timeout=settings.SEEDER_TIMEOUT) as client:
        seeder = Seeder(client, random.Random(args.seed))
        if not seeder.wait_until_ready(attempts=args.wait):
            logger.error("Service at %s unavailable after %d attempts", args.base_url, args.wait)
            return 1
        report = seeder.seed(args.teams, args.members, args.pull_requests)
    return 0 if report.ok else 2


if __name__ == "__main__":
    sys.exit(main())
