"""Tool implementations (Markdown rendering of UCPF output).

Modules
-------
markdown.py      — Section and bullet-list helpers
analysis.py      — analyze_problem: full UCPF analysis report
exploration.py   — explore_creatively: perspectives, connections, metaphors
"""
