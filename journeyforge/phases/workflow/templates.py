"""
Phase templates and grade-band scaffolding examples.

DEFAULT_PHASE_TEMPLATES seeds every new journey. GRADE_EXAMPLES holds
ready-made objectives and activities per grade band and phase that a
educator can pull into a phase with ``apply_grade_examples``.
"""

from __future__ import annotations

from typing import Any

from journeyforge.core.enums import GradeBand, PhaseType
from journeyforge.core.models.journey import (
    DEFAULT_ALLOCATIONS,
    Activity,
    IterationSupport,
    Objective,
    Phase,
    PhaseAssessment,
    format_weeks,
    phase_duration_weeks,
)


DEFAULT_PHASE_TEMPLATES: dict[PhaseType, dict[str, Any]] = {
    PhaseType.ANALYZE: {
        "name": "Analyze",
        "description": "Understanding the problem deeply through research and investigation",
        "iteration_support": {
            "triggers": [
                "Discovering new information that changes understanding",
                "Realizing initial problem definition was incomplete",
                "Finding gaps in research",
            ],
            "resources": [
                "Research guides and templates",
                "Expert consultation sessions",
                "Additional data sources",
            ],
            "time_buffer": 20,
            "strategies": ["Quick research sprints", "Peer knowledge sharing", "Expert interviews"],
        },
        "assessment": {
            "formative": [
                "Research progress checks",
                "Problem definition drafts",
                "Peer feedback on understanding",
            ],
            "summative": "Comprehensive problem analysis document",
            "rubric_criteria": [
                "Depth of research",
                "Multiple perspectives considered",
                "Clear problem identification",
                "Evidence-based conclusions",
            ],
        },
        "student_agency": [
            "Choice of research methods",
            "Selection of focus areas",
            "Documentation format",
        ],
    },
    PhaseType.BRAINSTORM: {
        "name": "Brainstorm",
        "description": "Generating creative solutions and exploring possibilities",
        "iteration_support": {
            "triggers": [
                "Ideas not feasible with available resources",
                "New insights from prototype testing",
                "Feedback suggesting different approaches",
            ],
            "resources": [
                "Ideation frameworks and tools",
                "Creative thinking exercises",
                "Inspiration examples",
            ],
            "time_buffer": 15,
            "strategies": [
                "Rapid ideation sessions",
                "Cross-pollination workshops",
                "Solution pivoting protocols",
            ],
        },
        "assessment": {
            "formative": [
                "Idea generation quantity",
                "Solution diversity assessment",
                "Feasibility quick checks",
            ],
            "summative": "Solution portfolio with rationale",
            "rubric_criteria": [
                "Creativity and originality",
                "Range of solutions",
                "Connection to problem",
                "Feasibility consideration",
            ],
        },
        "student_agency": [
            "Ideation techniques used",
            "Solution selection criteria",
            "Collaboration methods",
        ],
    },
    PhaseType.PROTOTYPE: {
        "name": "Prototype",
        "description": "Building, testing, and refining solutions through iteration",
        "iteration_support": {
            "triggers": [
                "Prototype failure or unexpected results",
                "User feedback requiring changes",
                "Technical challenges discovered",
            ],
            "resources": [
                "Prototyping materials and tools",
                "Testing protocols",
                "Iteration planning templates",
            ],
            "time_buffer": 30,
            "strategies": [
                "Rapid prototyping cycles",
                "A/B testing approaches",
                "Fail-fast methodologies",
            ],
        },
        "assessment": {
            "formative": [
                "Prototype iterations documented",
                "Testing data collection",
                "Reflection on failures",
            ],
            "summative": "Working prototype with documentation",
            "rubric_criteria": [
                "Functionality of solution",
                "Iteration and improvement",
                "Testing thoroughness",
                "Problem-solution fit",
            ],
        },
        "student_agency": ["Prototyping methods", "Testing approaches", "Iteration decisions"],
    },
    PhaseType.EVALUATE: {
        "name": "Evaluate",
        "description": "Reflecting, refining, and presenting the final solution",
        "iteration_support": {
            "triggers": [
                "Final testing reveals issues",
                "Presentation feedback suggests improvements",
                "Self-reflection identifies gaps",
            ],
            "resources": [
                "Presentation templates",
                "Reflection frameworks",
                "Peer review protocols",
            ],
            "time_buffer": 10,
            "strategies": ["Final polish sprints", "Peer review sessions", "Presentation practice"],
        },
        "assessment": {
            "formative": [
                "Presentation drafts",
                "Peer feedback sessions",
                "Self-assessment reflections",
            ],
            "summative": "Final presentation and reflection portfolio",
            "rubric_criteria": [
                "Solution effectiveness",
                "Communication clarity",
                "Reflection depth",
                "Learning demonstration",
            ],
        },
        "student_agency": ["Presentation format", "Audience selection", "Reflection focus"],
    },
}


def build_default_phases(project_duration_weeks: int) -> list[Phase]:
    """Fresh, empty phases with default allocations and derived durations."""
    phases = []
    for phase_type, template in DEFAULT_PHASE_TEMPLATES.items():
        allocation = DEFAULT_ALLOCATIONS[phase_type]
        weeks = phase_duration_weeks(project_duration_weeks, allocation)
        phases.append(
            Phase(
                type=phase_type,
                name=template["name"],
                description=template["description"],
                allocation=allocation,
                duration_weeks=weeks,
                duration=format_weeks(weeks),
                iteration_support=IterationSupport(**template["iteration_support"]),
                assessment=PhaseAssessment(**template["assessment"]),
                student_agency=list(template["student_agency"]),
            )
        )
    return phases


# ============================================================================
# Grade-band examples
# ============================================================================

# (name, duration, description)
ExampleActivity = tuple[str, str, str]

GRADE_EXAMPLES: dict[GradeBand, dict[PhaseType, dict[str, list]]] = {
    GradeBand.ELEMENTARY: {
        PhaseType.ANALYZE: {
            "objectives": [
                "Understand what makes our playground safe or unsafe",
                "Learn what other schools do for playground safety",
                "Talk to students and teachers about playground problems",
            ],
            "activities": [
                ("Playground Investigation", "2 class periods",
                 "Walk around and document safety issues with drawings and photos"),
                ("Story Time Research", "1 class period",
                 "Read books about playground design and safety"),
                ("Interview Friends", "1 class period",
                 "Ask classmates about their playground experiences"),
            ],
        },
        PhaseType.BRAINSTORM: {
            "objectives": [
                "Think of many different ways to make the playground better",
                "Draw or build models of playground improvements",
                "Share ideas with classmates and get feedback",
            ],
            "activities": [
                ("Idea Storm", "1 class period", "Draw as many playground ideas as possible"),
                ("Build with Blocks", "2 class periods",
                 "Create playground models with building materials"),
                ("Gallery Walk", "1 class period",
                 "Share ideas and get sticker votes from classmates"),
            ],
        },
        PhaseType.PROTOTYPE: {
            "objectives": [
                "Build a model or drawing of our best playground idea",
                "Test if our idea would really work",
                "Make improvements based on feedback",
            ],
            "activities": [
                ("Build Our Model", "3 class periods", "Create detailed model with craft materials"),
                ("Test It Out", "1 class period", "Use toy figures to test if playground works"),
                ("Make It Better", "2 class periods", "Improve model based on testing"),
            ],
        },
        PhaseType.EVALUATE: {
            "objectives": [
                "Show our playground design to others",
                "Explain why our design is good",
                "Think about what we learned",
            ],
            "activities": [
                ("Practice Presenting", "1 class period",
                 "Practice explaining our design to partners"),
                ("Big Presentation", "1 class period", "Present to principal and parents"),
                ("Learning Reflection", "1 class period", "Draw or write about what we learned"),
            ],
        },
    },
    GradeBand.MIDDLE: {
        PhaseType.ANALYZE: {
            "objectives": [
                "Research the environmental impact of school lunch waste",
                "Analyze current waste management practices",
                "Identify key stakeholders and their perspectives",
            ],
            "activities": [
                ("Waste Audit", "1 week", "Measure and categorize cafeteria waste daily"),
                ("Stakeholder Interviews", "3 days",
                 "Interview cafeteria staff, students, and administrators"),
                ("Comparative Research", "2 days",
                 "Research other schools sustainable lunch programs"),
            ],
        },
        PhaseType.BRAINSTORM: {
            "objectives": [
                "Generate diverse solutions for reducing lunch waste",
                "Evaluate feasibility of different approaches",
                "Select most promising solutions for prototyping",
            ],
            "activities": [
                ("Design Thinking Workshop", "2 class periods",
                 "Use design thinking to generate solutions"),
                ("Solution Mapping", "1 class period",
                 "Create visual maps connecting solutions to problems"),
                ("Feasibility Analysis", "2 class periods",
                 "Evaluate solutions for cost, impact, and practicality"),
            ],
        },
        PhaseType.PROTOTYPE: {
            "objectives": [
                "Create working prototypes of waste reduction solutions",
                "Test prototypes in real cafeteria conditions",
                "Iterate based on testing results and feedback",
            ],
            "activities": [
                ("Prototype Development", "1 week",
                 "Build composting system, reusable container program, or waste tracking app"),
                ("Pilot Testing", "3 days", "Test prototypes during lunch periods"),
                ("Iteration Cycles", "4 days", "Refine based on test results and user feedback"),
            ],
        },
        PhaseType.EVALUATE: {
            "objectives": [
                "Measure impact of implemented solutions",
                "Present findings to school community",
                "Reflect on learning and process",
            ],
            "activities": [
                ("Impact Assessment", "2 days", "Measure waste reduction achieved"),
                ("Community Presentation", "1 class period",
                 "Present to school board and parents"),
                ("Reflection Portfolio", "2 days",
                 "Create portfolio documenting journey and learning"),
            ],
        },
    },
    GradeBand.HIGH: {
        PhaseType.ANALYZE: {
            "objectives": [
                "Conduct systematic literature review on urban food deserts",
                "Analyze local food access data using GIS mapping",
                "Identify root causes through systems thinking",
            ],
            "activities": [
                ("Academic Research", "1.5 weeks",
                 "Review peer-reviewed articles and government reports"),
                ("Data Analysis", "1 week", "Use GIS tools to map food access in community"),
                ("Community Ethnography", "1 week",
                 "Conduct field observations and resident interviews"),
            ],
        },
        PhaseType.BRAINSTORM: {
            "objectives": [
                "Develop innovative solutions using entrepreneurial thinking",
                "Create business models for sustainable implementation",
                "Build stakeholder coalition for support",
            ],
            "activities": [
                ("Innovation Sprint", "3 days",
                 "Generate solutions using various innovation frameworks"),
                ("Business Model Canvas", "2 days",
                 "Develop sustainable business models for solutions"),
                ("Stakeholder Engagement", "1 week",
                 "Present ideas to community partners for feedback"),
            ],
        },
        PhaseType.PROTOTYPE: {
            "objectives": [
                "Develop minimum viable product for chosen solution",
                "Conduct user testing with target population",
                "Iterate based on data and feedback",
            ],
            "activities": [
                ("MVP Development", "2 weeks",
                 "Build mobile app, pop-up market, or delivery system prototype"),
                ("User Testing", "1 week", "Conduct structured testing with community members"),
                ("Data-Driven Iteration", "1 week", "Analyze metrics and refine solution"),
            ],
        },
        PhaseType.EVALUATE: {
            "objectives": [
                "Measure social impact using established metrics",
                "Present to potential funders and partners",
                "Create implementation roadmap",
            ],
            "activities": [
                ("Impact Measurement", "3 days",
                 "Calculate social return on investment (SROI)"),
                ("Pitch Presentation", "2 days",
                 "Present to city council and potential investors"),
                ("Strategic Planning", "2 days",
                 "Create detailed implementation plan for scaling"),
            ],
        },
    },
}


def grade_examples(
    grade_level: GradeBand | str, phase_type: PhaseType
) -> tuple[list[Objective], list[Activity]]:
    """Fresh example objectives and activities for a grade band and phase."""
    band = GradeBand.from_text(grade_level)
    examples = GRADE_EXAMPLES[band][phase_type]
    objectives = [Objective(text=text) for text in examples["objectives"]]
    activities = [
        Activity(name=name, duration=duration, description=description)
        for name, duration, description in examples["activities"]
    ]
    return objectives, activities
