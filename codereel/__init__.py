"""Codereel - Code-diagram transformation engine for explainer videos.

Turn source text into tokenized, positioned code blocks and animate
structural edits on them: extract a line range into its own block, merge
blocks toward a point, morph them into a new snippet, inject call clones at
the original anchors, and restore the surrounding lines. World-space anchors
stay consistent while blocks move, scale, and shift lines.

Exports:
    __version__: str - The current version of the codereel package.

Submodules:
    tokenizer: Ordered-rule line tokenizer for syntax coloring.
    document: Immutable line-indexed text container.
    metrics: Approximate text metrics and auto-fit font sizing.
    theme: Syntax themes and the neon terminal palette.
    scene: Arena of render-state records addressed by handles.
    coordinates: Local and world coordinate mapping.
    presets: Named slot layouts for initial placement.
    timeline: Transitions and the cooperative scheduler.
    block: The animatable CodeBlock.
    motion: Extract, merge, morph, inject, and restore operators.
    ghosts: Detached line clones for fly and fade effects.
    render: Rich terminal preview.
    runner: Command implementations.
    cli: Command-line interface.
"""

__version__ = "0.1.0"
