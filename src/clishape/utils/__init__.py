"""Cross-cutting helpers with no dependency on ``core``, ``domains`` or ``cli``.

:mod:`clishape.utils.limits` caps the size of caller-supplied values
before guards inspect them.
"""
