"""Click option helpers for the --server / --client mode selector."""
import click


def conflicting_modes(name: str, conflicts_with: tuple[str, ...], opts: dict) -> list[str]:
    """Return the other mode flags set alongside name.

    Args:
        name: Name of the current mode flag.
        conflicts_with: Names of the mode flags it cannot be combined with.
        opts: Dictionary of parsed options.

    Returns:
        Names from conflicts_with that are also set in opts.
    """
    return [other for other in conflicts_with if opts.get(other)]


class ModeOption(click.Option):
    """Boolean mode flag that refuses to be combined with other mode flags."""

    def __init__(self, *args, **kwargs):
        """Initialize with the conflicts_with tuple of rival mode names."""
        self.conflicts_with = tuple(kwargs.pop("conflicts_with", ()))
        kwargs.setdefault("is_flag", True)
        super().__init__(*args, **kwargs)

    def handle_parse_result(self, ctx, opts, args):
        """Raise UsageError when a rival mode flag was also given."""
        if opts.get(self.name):
            clashing = conflicting_modes(self.name, self.conflicts_with, opts)
            if clashing:
                flags = " and ".join(f"--{mode}" for mode in (self.name, *clashing))
                raise click.UsageError(f"Options {flags} are mutually exclusive", ctx=ctx)
        return super().handle_parse_result(ctx, opts, args)
