"""Run-wide overwrite and fallback policy."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Policy:
    """
    The four switches that decide what happens to each target file.

    Resolved once from the command line and shared, read-only, by every
    file processed during a run.
    """

    # Raise instead of replacing an existing, non-empty target
    fail_if_exists: bool = False

    # Write the reduced document even when it is bigger than the source
    always_rewrite: bool = False

    # Leave the target alone when the reduction backend fails
    dont_copy_on_error: bool = False

    # Do not touch targets that already exist and are non-empty
    skip_existing: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "fail_if_exists": self.fail_if_exists,
            "always_rewrite": self.always_rewrite,
            "dont_copy_on_error": self.dont_copy_on_error,
            "skip_existing": self.skip_existing,
        }
