"""
Issue Store - in-memory owner of users, issues, technicians, comments and upvotes.

DESIGN NOTE:
- One instance per process, created at startup and injected into routes
- "Not found" is signalled with None/False, never an exception
- Missing required data on create raises InvariantViolation
- Every mutation runs under a single re-entrant lock; sync FastAPI
  handlers run on a thread pool
- issue.upvotes always equals the size of the issue's voter set
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Set
from uuid import uuid4
import logging
import threading

from pydantic import ValidationError

from app.models.issue import IssueStatus, IssueWithReporter, MaintenanceIssue, UpvoteResult, utcnow
from app.models.technician import Comment, Technician, TechnicianStatus
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Never overwritten by update_issue
IMMUTABLE_ISSUE_FIELDS = {"id", "created_at"}

UNKNOWN_USER_CREATED_AT = datetime(1970, 1, 1, tzinfo=timezone.utc)


class InvariantViolation(ValueError):
    """Raised when a write would break the data model (e.g. issue without reporter)."""


def placeholder_user(user_id: str) -> User:
    """Stand-in reporter for issues whose user record is missing."""
    return User(
        id=user_id,
        username="Unknown User",
        email="unknown@localhost",
        role=UserRole.USER,
        credibility_score=0,
        external_auth_id="unknown",
        created_at=UNKNOWN_USER_CREATED_AT,
    )


def _detached(record):
    """Deep copy so callers never share nested state with stored records."""
    return record.model_copy(deep=True) if record is not None else None


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in error.errors()
    )


class IssueStore:
    """
    Process-local store. Separate maps per entity kind so each can later
    move to real persistence independently.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self.users: Dict[str, User] = {}
        self.issues: Dict[str, MaintenanceIssue] = {}
        self.technicians: Dict[str, Technician] = {}
        self.comments: Dict[str, Comment] = {}
        self.upvotes: Dict[str, Set[str]] = {}  # issue_id -> voter user ids

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def clear(self) -> None:
        with self._lock:
            self.users.clear()
            self.issues.clear()
            self.technicians.clear()
            self.comments.clear()
            self.upvotes.clear()

    def seed(self) -> None:
        """Load the demo users, technicians and issues on top of current state."""
        from app.services.seed_data import seed_demo_data

        with self._lock:
            seed_demo_data(self)

    def reset(self) -> None:
        """Drop everything and reload the demo data."""
        with self._lock:
            self.clear()
            self.seed()
        logger.info("Store reset to demo data")

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> Optional[User]:
        with self._lock:
            return _detached(self.users.get(user_id))

    def get_user_by_external_auth_id(self, external_auth_id: str) -> Optional[User]:
        with self._lock:
            return _detached(next(
                (user for user in self.users.values() if user.external_auth_id == external_auth_id),
                None,
            ))

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            return _detached(next((user for user in self.users.values() if user.username == username), None))

    def create_user(self, data: Dict[str, Any]) -> User:
        record = dict(data)
        record["id"] = str(uuid4())
        record["created_at"] = utcnow()
        if record.get("role") is None:
            record["role"] = UserRole.USER
        if record.get("credibility_score") is None:
            record["credibility_score"] = 7

        try:
            user = User(**record)
        except ValidationError as e:
            raise InvariantViolation(f"Invalid user: {_describe(e)}") from e

        with self._lock:
            self.users[user.id] = user
        logger.info(f"Created user {user.id} ({user.username})")
        return _detached(user)

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    def _join_reporter(self, issue: MaintenanceIssue) -> IssueWithReporter:
        reporter = self.users.get(issue.reporter_id) or placeholder_user(issue.reporter_id)
        return IssueWithReporter(**issue.model_dump(), reporter=reporter.model_dump())

    def get_all_issues(self) -> List[IssueWithReporter]:
        """All issues joined with their reporter, newest first."""
        with self._lock:
            joined = [self._join_reporter(issue) for issue in self.issues.values()]
        return sorted(joined, key=lambda issue: issue.created_at, reverse=True)

    def get_user_issues(self, user_id: str) -> List[IssueWithReporter]:
        """Issues reported by one user, newest first."""
        with self._lock:
            joined = [
                self._join_reporter(issue)
                for issue in self.issues.values()
                if issue.reporter_id == user_id
            ]
        return sorted(joined, key=lambda issue: issue.created_at, reverse=True)

    def get_issue(self, issue_id: str) -> Optional[MaintenanceIssue]:
        with self._lock:
            return _detached(self.issues.get(issue_id))

    def create_issue(self, data: Dict[str, Any]) -> MaintenanceIssue:
        """
        Persist a new issue.

        status, progress and upvotes are forced to open/0/0 whatever the caller sends.

        Raises:
            InvariantViolation: missing/unknown reporter or invalid category/severity
        """
        reporter_id = data.get("reporter_id")
        if not reporter_id:
            raise InvariantViolation("reporter_id is required to create an issue")
        if data.get("category") is None or data.get("severity") is None:
            raise InvariantViolation("category and severity must be resolved before creating an issue")

        now = utcnow()
        record = dict(data)
        record.update({
            "id": str(uuid4()),
            "status": IssueStatus.OPEN,
            "progress": 0,
            "upvotes": 0,
            "location": data.get("location") or None,
            "image_urls": list(data.get("image_urls") or []),
            "created_at": now,
            "updated_at": now,
        })

        try:
            issue = _detached(MaintenanceIssue(**record))
        except ValidationError as e:
            raise InvariantViolation(f"Invalid issue: {_describe(e)}") from e

        with self._lock:
            if reporter_id not in self.users:
                raise InvariantViolation(f"Reporter {reporter_id} does not exist")
            self.issues[issue.id] = issue
            self.upvotes[issue.id] = set()

        logger.info(f"Created issue {issue.id}: {issue.category.value} / {issue.severity.value}")
        return _detached(issue)

    def update_issue(self, issue_id: str, updates: Dict[str, Any]) -> Optional[MaintenanceIssue]:
        """
        Merge fields over an existing issue and refresh updated_at.

        Returns None if the issue does not exist. upvotes is not recomputed here;
        only pass it when restoring known-consistent state.
        """
        with self._lock:
            issue = self.issues.get(issue_id)
            if issue is None:
                return None

            changes = {key: value for key, value in updates.items() if key not in IMMUTABLE_ISSUE_FIELDS}
            if issue.ai_analysis is not None:
                changes.pop("ai_analysis", None)

            merged = issue.model_dump()
            merged.update(changes)
            merged["updated_at"] = utcnow()

            try:
                updated = MaintenanceIssue(**merged)
            except ValidationError as e:
                raise InvariantViolation(f"Invalid issue update: {_describe(e)}") from e

            self.issues[issue_id] = updated
            logger.debug(f"Updated issue {issue_id}: {sorted(changes)}")
            return _detached(updated)

    def modify_issue(
        self,
        issue_id: str,
        planner: Callable[[MaintenanceIssue], Dict[str, Any]],
    ) -> Optional[MaintenanceIssue]:
        """
        Read-plan-write under the store lock.

        planner receives a copy of the current issue and returns the fields to merge.
        Exceptions from planner propagate and nothing is written.
        """
        with self._lock:
            issue = self.issues.get(issue_id)
            if issue is None:
                return None
            return self.update_issue(issue_id, planner(_detached(issue)))

    def restore_issue(self, issue: MaintenanceIssue, voters: Iterable[str] = ()) -> MaintenanceIssue:
        """
        Insert a fully-formed issue (seed data, fixtures) with its voter set.
        upvotes is taken from the voter set.
        """
        voter_set = set(voters)
        restored = issue.model_copy(update={"upvotes": len(voter_set)}, deep=True)
        with self._lock:
            self.issues[restored.id] = restored
            self.upvotes[restored.id] = voter_set
        return _detached(restored)

    def delete_issue(self, issue_id: str) -> bool:
        """Remove an issue. Comments and voter sets are left orphaned."""
        with self._lock:
            removed = self.issues.pop(issue_id, None)
        if removed is not None:
            logger.info(f"Deleted issue {issue_id}")
        return removed is not None

    # ------------------------------------------------------------------
    # Upvotes
    # ------------------------------------------------------------------

    def toggle_upvote(self, issue_id: str, user_id: str) -> UpvoteResult:
        """
        Flip user_id's vote on issue_id.

        Unknown issue: no-op returning upvoted=False, new_count=0.
        """
        result = self.try_toggle_upvote(issue_id, user_id)
        if result is None:
            logger.warning(f"⚠️ Upvote toggle on unknown issue {issue_id} ignored")
            return UpvoteResult(upvoted=False, new_count=0)
        return result

    def try_toggle_upvote(self, issue_id: str, user_id: str) -> Optional[UpvoteResult]:
        """
        Like toggle_upvote, but returns None when the issue does not exist.

        The existence check, the voter set and issue.upvotes change together
        under the lock.
        """
        with self._lock:
            issue = self.issues.get(issue_id)
            if issue is None:
                return None

            voters = self.upvotes.setdefault(issue_id, set())
            if user_id in voters:
                voters.discard(user_id)
                upvoted = False
            else:
                voters.add(user_id)
                upvoted = True

            self.issues[issue_id] = issue.model_copy(
                update={"upvotes": len(voters), "updated_at": utcnow()}
            )
            return UpvoteResult(upvoted=upvoted, new_count=len(voters))

    def get_upvoters(self, issue_id: str) -> Set[str]:
        with self._lock:
            return set(self.upvotes.get(issue_id, set()))

    def has_upvoted(self, issue_id: str, user_id: str) -> bool:
        with self._lock:
            return user_id in self.upvotes.get(issue_id, set())

    # ------------------------------------------------------------------
    # Technicians
    # ------------------------------------------------------------------

    def get_all_technicians(self) -> List[Technician]:
        with self._lock:
            return [_detached(technician) for technician in self.technicians.values()]

    def get_technician(self, technician_id: str) -> Optional[Technician]:
        with self._lock:
            return _detached(self.technicians.get(technician_id))

    def create_technician(self, data: Dict[str, Any]) -> Technician:
        record = dict(data)
        record["id"] = str(uuid4())
        record["created_at"] = utcnow()
        record["status"] = record.get("status") or TechnicianStatus.AVAILABLE
        record["phone"] = record.get("phone") or None
        record["email"] = record.get("email") or None

        try:
            technician = Technician(**record)
        except ValidationError as e:
            raise InvariantViolation(f"Invalid technician: {_describe(e)}") from e

        with self._lock:
            self.technicians[technician.id] = technician
        logger.info(f"Created technician {technician.id} ({technician.specialty})")
        return _detached(technician)

    def update_technician(self, technician_id: str, updates: Dict[str, Any]) -> Optional[Technician]:
        with self._lock:
            technician = self.technicians.get(technician_id)
            if technician is None:
                return None

            merged = technician.model_dump()
            merged.update({key: value for key, value in updates.items() if key not in ("id", "created_at")})
            try:
                updated = Technician(**merged)
            except ValidationError as e:
                raise InvariantViolation(f"Invalid technician update: {_describe(e)}") from e

            self.technicians[technician_id] = updated
            return _detached(updated)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def get_comments_by_issue_id(self, issue_id: str) -> List[Comment]:
        with self._lock:
            return [_detached(comment) for comment in self.comments.values() if comment.issue_id == issue_id]

    def create_comment(self, issue_id: str, data: Dict[str, Any]) -> Comment:
        record = dict(data)
        record.update({"id": str(uuid4()), "issue_id": issue_id, "created_at": utcnow()})
        try:
            comment = Comment(**record)
        except ValidationError as e:
            raise InvariantViolation(f"Invalid comment: {_describe(e)}") from e

        with self._lock:
            self.comments[comment.id] = comment
        return _detached(comment)
