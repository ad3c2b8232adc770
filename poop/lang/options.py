"""Options of a poop run. One Options object configures one Session; nothing here is global."""

from dataclasses import dataclass


DEFAULT_MAX_STEPS = 100000


@dataclass
class Options:
    """Configuration surface of the interpreter.

    lazy_mode          lazy (call-by-name) application; False selects the legacy eager strategy
    debug_mode         log a line for each rewrite
    trace_mode         log the whole sequence before each step
    max_steps          step cap so runaway programs cannot hang the host; None or 0 disables it
    yield_every        the driver yields to the event loop every this many steps
    print_total_steps  log the number of steps at termination (with debug_mode)
    show_step_no       prefix log lines with the step number
    empty_literal      what the bare literal Poop decodes to: "" or " " depending on language version
    strict_names       reject control characters as macro names
    max_expansions     pass cap for deep macro expansion inside func bodies
    """
    lazy_mode: bool = True
    debug_mode: bool = False
    trace_mode: bool = False
    max_steps: int = DEFAULT_MAX_STEPS
    yield_every: int = 1000
    print_total_steps: bool = False
    show_step_no: bool = False
    empty_literal: str = ""
    strict_names: bool = True
    max_expansions: int = 256

    @classmethod
    def from_args(cls, args):
        """Builds Options from an argparse namespace produced by poop.main."""
        return cls(
            lazy_mode=args.lazy.lower() == "true",
            debug_mode=args.debug,
            trace_mode=args.trace,
            max_steps=args.max_steps,
            print_total_steps=args.steps,
            show_step_no=args.step_no,
            empty_literal=" " if args.space_literal else "",
            strict_names=not args.lenient_names,
        )
