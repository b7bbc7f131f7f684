# src/config/steps.py — v1
"""Declarative step catalog for the sermon research workflow.

Order is significant: each step may use the results of every step listed
before it. Gated steps (requires_hitl=True) must have a review stage in
pipeline/hitl.py.
"""

from __future__ import annotations

from sermonflow.core.models import StepDefinition

STEP_CATALOG: list[StepDefinition] = [
    # --- RESEARCH PHASE ---
    # Wave 1: foundation
    StepDefinition(
        id="original-text", phase="Research", wave=1,
        agent_name="Original Text Analyst",
        description="Original-language vocabulary, grammar and syntax analysis",
    ),
    StepDefinition(
        id="manuscript-comp", phase="Research", wave=1,
        agent_name="Manuscript Comparator",
        description="Manuscript and translation comparison with variant analysis",
    ),
    StepDefinition(
        id="biblical-geo", phase="Research", wave=1,
        agent_name="Biblical Geography Expert",
        description="Biblical geography and city layout analysis",
    ),
    StepDefinition(
        id="hist-cultural", phase="Research", wave=1,
        agent_name="Historical-Cultural Expert",
        description="Historical, cultural and period background",
    ),
    # Wave 2: deep structure
    StepDefinition(
        id="struct-analyst", phase="Research", wave=2,
        agent_name="Structure Analyst",
        description="Paragraph division and argument flow analysis",
    ),
    StepDefinition(
        id="parallel-passage", phase="Research", wave=2,
        agent_name="Parallel Passage Analyst",
        description="Parallel passages and intertextuality analysis",
    ),
    StepDefinition(
        id="keyword-expert", phase="Research", wave=2,
        agent_name="Keyword Expert",
        description="Key term study and theological usage",
    ),
    # Wave 3: theological integration
    StepDefinition(
        id="theo-analyst", phase="Research", wave=3,
        agent_name="Theological Analyst",
        description="Theological themes and Christ-centred analysis",
    ),
    StepDefinition(
        id="literary-analyst", phase="Research", wave=3,
        agent_name="Literary Analyst",
        description="Genre analysis and literary devices",
    ),
    StepDefinition(
        id="hist-context", phase="Research", wave=3,
        agent_name="Historical Context Analyst",
        description="Historical and canonical context analysis",
    ),
    # Wave 4: synthesis
    StepDefinition(
        id="rhetoric-analyst", phase="Research", wave=4,
        agent_name="Rhetorical Analyst",
        description="Rhetorical analysis and persuasion strategy",
        requires_hitl=True,
    ),
    # --- PLANNING PHASE ---
    StepDefinition(
        id="message-synth", phase="Planning",
        agent_name="Core Message Architect",
        description="Core message (Big Idea) and main points",
        requires_hitl=True,
    ),
    StepDefinition(
        id="outline-architect", phase="Planning",
        agent_name="Outline Designer",
        description="Sermon outline and flow design",
        requires_hitl=True,
    ),
    # --- IMPLEMENTATION PHASE ---
    StepDefinition(
        id="sermon-writer", phase="Implementation",
        agent_name="Sermon Script Writer",
        description="Full manuscript drafting in the requested style",
    ),
    StepDefinition(
        id="sermon-reviewer", phase="Implementation",
        agent_name="Sermon Reviewer",
        description="Final review and quality assessment",
        requires_hitl=True,
    ),
]

# Step whose result is exported as the sermon manuscript.
MANUSCRIPT_STEP_ID = "sermon-writer"

SERMON_TYPES: list[str] = [
    "Expository sermon",
    "Topical sermon",
    "Application sermon",
    "In-depth study",
]

AUDIENCE_TYPES: list[str] = [
    "General congregation",
    "New believers / seekers",
    "Seminarians / ministers",
    "Youth / students",
]

LENGTH_OPTIONS: list[str] = [
    "20 minutes (approx. 3,000 characters)",
    "30 minutes (approx. 4,500 characters)",
    "40 minutes (approx. 6,000 characters)",
]
