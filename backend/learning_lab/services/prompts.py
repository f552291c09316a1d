"""Prompt templates for every generative call."""

from collections.abc import Sequence

TUTOR_NAME = "Liquid Learning Lab"

EMOJI_INSTRUCTION = "Use relevant emojis throughout your response to make it more engaging and visual."

CLASSIFICATION_PROMPT = """Analyze this learning question and categorize it into the most appropriate subject.
Question: "{text}"

Respond with JSON only, in this format: {{
  "subject": "specific subject name",
  "category": "broader category",
  "icon": "appropriate emoji",
  "confidence": 0.95
}}

Choose from subjects like: Mathematics, Physics, Chemistry, Biology, History, Literature, Computer Science, Art, Music, Philosophy, Psychology, Economics, Geography, Languages, etc."""

TITLE_PROMPT = """Write a short, human-readable title for a tutoring conversation that opens with this message:
"{text}"

Rules:
- At most 5 words
- No quotes, no emojis, no trailing punctuation
- Respond with the title only"""

MINDMAP_PROMPT = """Create a structured mind map for the topic: {topic}
Respond with JSON only, in this format: {{
  "centralTopic": "main topic",
  "branches": [
    {{
      "label": "branch name",
      "children": ["child1", "child2", "child3"]
    }}
  ]
}}"""

# Used for visuals generated automatically alongside a chat answer
CHAT_IMAGE_PROMPT = """Create a comprehensive educational visual that explains: {content}
The image should be designed as a learning aid that:
- Breaks down the topic into clear, digestible components
- Uses diagrams, flowcharts, or step-by-step illustrations
- Includes descriptive labels and annotations
- Shows cause-and-effect relationships or processes
- Uses a clean, textbook-style layout with good readability
- Employs colors strategically to highlight important concepts
- Presents information in a logical, easy-to-follow sequence
- Avoids decorative elements that distract from learning
- Focuses on helping students understand and remember the concept"""

# Used by the standalone image endpoint
DIAGRAM_IMAGE_PROMPT = """Create an educational, step-by-step visual diagram that explains: {prompt}
The image should:
- Break down complex concepts into simple, easy-to-understand parts
- Include clear labels and annotations
- Use a clean, textbook-style design with good contrast
- Show relationships between different elements
- Be suitable for students to learn from
- Use diagrams, flowcharts, or infographics style
- Avoid cluttered or overly artistic elements
- Focus on clarity and educational value"""

KNOWLEDGE_TEST_SYSTEM_PROMPT = f"""You are an assessment designer for {TUTOR_NAME}.
You evaluate what a learner has studied and produce a short diagnostic report.
Respond with JSON only."""

KNOWLEDGE_TEST_PROMPT = """The learner has had conversations titled:
{titles}

Their recorded interests are:
{interests}

Produce a JSON object in this format: {{
  "currentLevel": "beginner" | "intermediate" | "advanced",
  "strengthAreas": ["..."],
  "improvementAreas": ["..."],
  "learningGoals": [{{"goal": "...", "difficulty": "easy" | "medium" | "hard", "estimatedTime": "2 weeks"}}],
  "recommendations": ["..."],
  "assessmentQuestions": [
    {{"question": "...", "options": ["A", "B", "C", "D"], "correctAnswer": 0, "topic": "..."}}
  ]
}}
Include 3 to 5 assessment questions drawn from the topics above."""


def classification_prompt(text: str) -> str:
    return CLASSIFICATION_PROMPT.format(text=text)


def title_prompt(text: str) -> str:
    return TITLE_PROMPT.format(text=text)


def mindmap_prompt(topic: str) -> str:
    return MINDMAP_PROMPT.format(topic=topic)


def chat_image_prompt(content: str) -> str:
    return CHAT_IMAGE_PROMPT.format(content=content)


def diagram_image_prompt(prompt: str) -> str:
    return DIAGRAM_IMAGE_PROMPT.format(prompt=prompt)


def tutor_system_prompt(subject: str, *, add_emojis: bool, interests: Sequence[str] = ()) -> str:
    """
    Build the tutor persona for one reply.

    Args:
        subject: Detected subject the tutor specializes in
        add_emojis: Whether to ask for emojis in the answer
        interests: User interest labels to relate examples to (may be empty)

    Returns:
        System prompt text
    """
    lines = [
        f"You are an AI tutor for {TUTOR_NAME} specializing in {subject}. "
        "You provide educational explanations that are clear, engaging, and personalized."
    ]
    if add_emojis:
        lines.append(EMOJI_INSTRUCTION)
    if interests:
        lines.append(
            f"The user is interested in: {', '.join(interests)}. "
            "Try to relate topics to these interests when relevant."
        )
    lines.append(
        f"Focus on providing accurate, educational content in the context of {subject}. "
        "Keep responses conversational but informative."
    )
    return "\n".join(lines)


def knowledge_test_prompt(titles: Sequence[str], interests: Sequence[str]) -> str:
    titles_text = "\n".join(f"- {t}" for t in titles) or "- (none yet)"
    interests_text = "\n".join(f"- {i}" for i in interests) or "- (none yet)"
    return KNOWLEDGE_TEST_PROMPT.format(titles=titles_text, interests=interests_text)
