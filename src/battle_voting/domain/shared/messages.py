"""Centralized message constants for error messages and log templates."""

from __future__ import annotations


class ErrorMessages:
    """Error messages returned in structured results or raised by entities."""

    # Vote validation (returned to callers, never raised)
    VOTING_NOT_ACTIVE = "Voting is not active"
    VOTING_DEADLINE_PASSED = "Voting deadline has passed"
    NOT_A_PARTICIPANT = "Not a participant in this battle"
    BATTLE_NOT_FOUND = "Battle not found"

    # Infrastructure failures (generic, safe to retry)
    CAST_VOTE_FAILED = "Failed to cast vote"
    INITIALIZE_VOTING_FAILED = "Failed to initialize voting"

    # Entity invariants
    OPPONENT_REQUIRED = "Both participants are required to resolve a winner"
    WINNER_NOT_PARTICIPANT = "Winner must be one of the battle participants"
    WINNER_STATUS_MISMATCH = "winner_id must be set if and only if status is completed"
    TOO_MANY_VOTES = "A battle cannot hold more than two votes"
    INVALID_VOTE_TIMEOUT = "Vote timeout must be at least 1 second"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"
    TIMEZONE_REQUIRED_NOW = "now must be timezone-aware"

    # Settings
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"


class LogTemplates:
    """Log message templates.

    Pass values as parameters to logger calls rather than pre-formatting.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Voting initialization
    VOTING_INITIALIZED = "Voting initialized for battle %s (creator=%s, opponent=%s)"
    VOTING_ALREADY_INITIALIZED = "Voting already initialized for battle %s (idempotent)"
    VOTING_REINITIALIZE_SKIPPED = (
        "Voting already initialized for battle %s with status %s, skipping"
    )
    VOTING_INITIALIZE_FAILED = "Failed to initialize voting for battle %s"

    # Vote casting
    VOTE_ALREADY_PROCESSED = "Vote event %s already processed for battle %s"
    VOTE_REJECTED = "Vote rejected for battle %s by %s: %s"
    VOTE_RECORDED = "Vote recorded for battle %s by %s: %s"
    VOTE_UPDATED = "Vote updated for battle %s by %s: %s"
    VOTE_CAST_FAILED = "Failed to cast vote for battle %s by %s"
    VOTE_LEGACY_FALLBACK = "No vote state for battle %s, using legacy vote path"
    BATTLE_COMPLETED = "Battle %s completed, winner=%s, scores=%s"
    TIE_RESOLVED = "Tie resolved for creator %s vs %s, scores=%s"

    # Timeout sweep
    SWEEP_CANDIDATES = "Found %s battles past their vote deadline"
    SWEEP_QUERY_FAILED = "Failed to query expired vote states"
    SWEEP_ITEM_SKIPPED = "Skipping timeout for battle %s (status=%s, already_processed=%s)"
    SWEEP_ITEM_FAILED = "Failed to process vote timeout for battle %s"
    SWEEP_UNREACHABLE_BOTH_VOTED = "Battle %s expired with both votes recorded, skipping"
    TIMEOUT_RESOLVED = "Vote timeout processed for battle %s, winner=%s, reason=%s"
    SWEEP_COMPLETED = "Timeout sweep finished: candidates=%s resolved=%s skipped=%s failed=%s"

    # Sweep job
    SWEEP_JOB_STARTED = "Vote timeout sweep job started (interval=%ss)"
    SWEEP_JOB_STOPPED = "Vote timeout sweep job stopped"
    SWEEP_JOB_ALREADY_RUNNING = "Vote timeout sweep job is already running"
    SWEEP_JOB_CYCLE_FAILED = "Error during vote timeout sweep"

    # Analytics
    ANALYTICS_EVENT_FAILED = "Failed to log analytics event %s for %s: %r"

    # Entry point
    SWEEPER_STARTING = "Starting battle voting sweeper (environment={environment})"
    SWEEPER_STOPPED = "Battle voting sweeper stopped"
    SWEEPER_DISABLED = "Vote timeout sweep is disabled by configuration"
    SWEEPER_FATAL_ERROR = "Fatal error in battle voting sweeper: %s"
