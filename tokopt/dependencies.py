"""
Tokopt dependency validation.

After a run has been parsed, but before anything executes, the whole queue is
checked at once:

- every queued option must find all of its required options among the other
  queued options;
- no queued option may find one of its unwanted options among them;
- a standalone option must be alone;
- the parser-wide groups must hold: all of `every` present, at least one of
  `some` present.

Each check is a set operation over option names and reports the complete,
sorted list of offending names, so the outcome does not depend on the order
options were given in. Any fault cancels the whole run.
"""
from .faults import (
    MissingOptionsError,
    MissingRequirementsError,
    UnwantedOptionsError,
    StandaloneOptionError,
    RequiredOptionsError,
    RequiredAnyOptionError,
)


def _quote(names, /):
    return ", ".join('"%s"' % name for name in names)


def validate(queue, /, every=(), some=()):
    """
    Check the dependency constraints of a parsed queue.

    Parameters
    - queue: the options recognized in one run, in input order.
    - every: names of options that must all be present.
    - some: names of options of which at least one must be present.

    Returns
    - list of faults, empty when the queue is valid. Each queued option
      contributes at most one fault per constraint flavor.
    """
    faults = []
    if not queue:
        if every or some:
            faults.append(MissingOptionsError(
                "options required but none was specified",
                hint='try "?" or "help" to see usage',
            ))
        return faults

    present = {option.name for option in queue}
    seen = set()

    for option in queue:
        if option.name in seen:
            continue
        seen.add(option.name)
        others = present - {option.name}

        if missing := sorted(option.required - others):
            faults.append(MissingRequirementsError(
                'option "%s" requires also: %s' % (option.name, _quote(missing)),
                hint="add the missing options to the command line",
            ))

        if option.standalone and others:
            faults.append(StandaloneOptionError(
                'option "%s" can\'t be used with other options, but specified with: %s' % (
                    option.name, _quote(sorted(others))
                ),
                hint='run "%s" on its own' % option.name,
            ))
        elif conflicts := sorted(option.unwanted & others):
            faults.append(UnwantedOptionsError(
                'option "%s" can\'t be used with: %s' % (option.name, _quote(conflicts)),
                hint="remove the conflicting options from the command line",
            ))

    if missing := sorted(set(every) - present):
        faults.append(RequiredOptionsError(
            "options required: %s (missing: %s)" % (_quote(every), _quote(missing)),
            hint='try "?" or "help" to see usage',
        ))

    if some and not set(some) & present:
        faults.append(RequiredAnyOptionError(
            "at least one of the options is required: %s" % _quote(some),
            hint='try "?" or "help" to see usage',
        ))

    return faults


__all__ = (
    "validate",
)
