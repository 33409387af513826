#!/usr/bin/env python3
"""
Ideation Workshop - Prompt Templates

All prompt templates and fixed assistant texts used by the refinement
chat, storyboard and elevator pitch flows.
Separated for maintainability and easy customization.
"""

from typing import List


# =============================================================================
# CONTEXT SECTIONS
# =============================================================================

ASSISTANT_INTRO = "You are an AI assistant helping with a design thinking workshop."

IDEA_CONTEXT = """The participants have created an idea combining these elements:
{card_lines}

The idea title is: "{title}"
Description: "{description}\""""

WORKSHOP_CONTEXT = """Workshop context:
- Workshop: {name}
- Workshop description: {description}
- Mission goal: {mission_goal}
- Persona: {persona_description}
- Scenario: {scenario_description}"""

NOT_SPECIFIED = "Not specified"


# =============================================================================
# REFINEMENT COMMAND TEMPLATES
# =============================================================================

REFLECT_INSTRUCTIONS = """Please provide 5-6 reflective questions that will help them think more deeply about their idea. Focus on feasibility, user benefits, implementation challenges, and potential improvements. Make your questions specific to their idea components."""

CREATIVE_INSTRUCTIONS = """Please suggest alternative approaches to their idea. Specifically:
1. Suggest 2 alternative "things" they could use
2. Suggest 2 alternative "sensors" they could incorporate
3. Suggest 1-2 ways to combine these alternatives to expand or enhance their original idea

Format each alternative exactly like this:

### Alternative 1: <short name>
**Thing**: <thing>
**Sensor**: <sensor>
**Action**: <action>
**Feedback**: <feedback>
**Service**: <service>

Follow each block with one or two sentences explaining how it enhances the core concept."""

PROVOKE_INSTRUCTIONS = """Please challenge their thinking by raising 5-6 provocative questions about:
- Potential privacy or ethical concerns
- Technical limitations or failures
- Unintended consequences
- User confusion or misuse
- Edge cases or accessibility issues

Make your questions specific to their idea components and help them identify blind spots."""

CHAT_INSTRUCTIONS = """The user has sent this message: "{message}"

Please respond to their message, keeping your response focused on their idea. Be helpful, encouraging, and constructive. If appropriate, remind them they can use commands like /reflect, /creative, or /provoke for specific types of feedback."""

CARDS_CHANGED_INSTRUCTIONS = """The idea's card combination has been updated: {change_summary}

Briefly acknowledge the change and explain how it affects the idea. Point out one new opportunity and one new risk it introduces."""

WELCOME_INSTRUCTIONS = """Write a short, friendly welcome message (3-4 sentences) for the idea refinement chat. Mention the idea by its title, highlight one interesting aspect of its card combination, and invite the participants to use /reflect, /creative, /provoke or /help."""

HELP_TEXT = """**Available Commands:**

- **/reflect** - Get reflective questions to improve feasibility and value
- **/creative** - Receive suggestions for alternative cards and approach variations
- **/provoke** - Identify potential weaknesses and edge cases
- **/help** - Display this help message

You can also just chat normally without using commands."""

FALLBACK_WELCOME = """Welcome to the Idea Refinement chat! I'll help you refine your idea "{title}" through interactive feedback.

Try these commands:
- Type **/reflect** for reflective questions
- Type **/creative** for alternative approaches
- Type **/provoke** to challenge assumptions
- Type **/help** for more information"""

CARD_CHANGE_NOTICE = "Card combination has been updated. The AI will consider these changes."

SUGGESTION_APPLIED = "Added {name} as a new {category} for your idea. The card combination has been updated."


# =============================================================================
# STORYBOARD
# =============================================================================

STORYBOARD_STEP_COUNT = 8

STORYBOARD_FLOW = [
    "Introduction to the user/context",
    "Initial interaction with the product/service",
    "How the sensor/detection works",
    "The action taken by the user or system",
    "How the feedback is provided",
    "How the service component works",
    "Resolution or outcome",
    "Benefits realized by the user",
]

STORYBOARD_INSTRUCTIONS = """Please create a coherent {count}-step storyboard that outlines the user journey for this idea. Each step should be a concise single sentence describing what happens at that point in the user experience.

The storyboard should follow a logical flow:
{flow}

Format your response as {count} separate steps, one per line, with no numbering or bullet points."""

STORYBOARD_PLACEHOLDER = "Step {number}: Continue the journey."


# =============================================================================
# ELEVATOR PITCH
# =============================================================================

ELEVATOR_PITCH_INSTRUCTIONS = """Write a compelling elevator pitch (4-5 sentences, under 120 words) for this idea. State the problem, who it is for, how the product works, and why it is better than existing alternatives. Return only the pitch text."""

STORYBOARD_SECTION = """User journey (storyboard):
{steps}"""

EVALUATION_SECTION = """Evaluation notes:
{entries}"""

DEFAULT_ELEVATOR_PITCH = (
    "{title} is a {thing}-based solution that uses {sensor} technology to address "
    "user needs efficiently and effectively. It provides a seamless experience while "
    "solving a critical problem in a novel way."
)


# =============================================================================
# FORMATTING HELPERS
# =============================================================================

def format_storyboard_flow() -> str:
    """Numbered narrative order for the storyboard prompt."""
    return "\n".join(f"{i}. {stage}" for i, stage in enumerate(STORYBOARD_FLOW, start=1))


def format_bullets(lines: List[str]) -> str:
    return "\n".join(f"- {line}" for line in lines)


def format_default_pitch(title: str = "", thing: str = "", sensor: str = "") -> str:
    """Template pitch used when generation is unavailable."""
    return DEFAULT_ELEVATOR_PITCH.format(
        title=title or "Our product",
        thing=thing or "solution",
        sensor=sensor or "sensor",
    )
