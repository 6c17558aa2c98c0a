"""Prompt builders for each analysis type.

Every prompt spells out the exact output grammar the parsers in
``parsers.py`` expect.
"""

from .parsers import target_chapter_count

# Transcript excerpt limits per prompt, in characters
KEYWORD_EXCERPT_CHARS = 3000
TOPIC_EXCERPT_CHARS = 2000
HIGHLIGHT_EXCERPT_CHARS = 4000


def excerpt(transcript: str, max_chars: int) -> str:
    """Truncate a transcript, marking the cut with an ellipsis."""
    if len(transcript) <= max_chars:
        return transcript
    return transcript[:max_chars] + "..."


def summary_prompt(transcript: str, max_words: int) -> str:
    return f"""Summarize the following video transcript in no more than {max_words} words.
Provide:
1. A concise summary paragraph
2. 3-5 key points as bullet points

Transcript:
{transcript}

Format your response as:
SUMMARY:
[summary paragraph]

KEY POINTS:
- [point 1]
- [point 2]
- [point 3]"""


def chapters_prompt(transcript: str, total_duration: float) -> str:
    target = target_chapter_count(total_duration)
    return f"""Analyze this video transcript and create {target} chapter markers with timestamps.
Video duration: {int(total_duration)} seconds

For each chapter, provide:
1. Timestamp (in seconds from start, between 0 and {int(total_duration)})
2. Chapter title (5-8 words)
3. Brief description (1 sentence)

Transcript:
{transcript}

Format your response EXACTLY as shown below (one chapter per block):

CHAPTER 1:
Timestamp: 0
Title: Introduction and overview of the topic
Description: The host introduces the subject and what will be covered.

CHAPTER 2:
Timestamp: [seconds]
Title: [title]
Description: [description]"""


def keywords_prompt(transcript: str, count: int) -> str:
    return f"""Extract the top {count} most important keywords from this transcript.

Rules:
- Focus on meaningful nouns, technical terms, and key concepts
- Avoid stop words (the, is, are, etc.)
- Include both single words and short phrases (2-3 words max)
- Rank by importance

Transcript:
{excerpt(transcript, KEYWORD_EXCERPT_CHARS)}

Respond with ONLY a JSON array in this exact format:
[
  {{"keyword": "example term", "relevance": 0.95, "frequency": 12}},
  {{"keyword": "another keyword", "relevance": 0.88, "frequency": 8}}
]"""


def topics_prompt(transcript: str, title: str, description: str) -> str:
    return f"""Analyze this video and identify the main topics/categories it covers.
For each topic, provide:
1. Topic name
2. Confidence score (0.0 to 1.0)
3. Category (e.g., Technology, Education, Entertainment, Science, etc.)

Video Title: {title}
Video Description: {description}

Transcript excerpt:
{excerpt(transcript, TOPIC_EXCERPT_CHARS)}

Format your response as one topic per line:
TOPIC: [topic name] | CONFIDENCE: [0.0-1.0] | CATEGORY: [category]
TOPIC: [topic name] | CONFIDENCE: [0.0-1.0] | CATEGORY: [category]"""


def highlights_prompt(transcript: str, total_duration: float, title: str, count: int) -> str:
    duration = int(total_duration)
    return f"""You are an expert video content analyzer. Analyze this video transcript and identify the {count} most significant, interesting, or important moments that would make great highlights.

Video Title: {title}
Video Duration: {duration} seconds

Instructions:
1. Identify key moments: major points, interesting facts, important conclusions, or engaging segments
2. Timestamps should be realistic (between 0 and {duration} seconds)
3. Duration should be 15-45 seconds for each highlight and must end before the video does
4. Score based on importance, engagement value, and relevance (0.0 to 1.0)

Transcript:
{excerpt(transcript, HIGHLIGHT_EXCERPT_CHARS)}

Format your response EXACTLY as shown below (one highlight per block):

HIGHLIGHT 1:
Timestamp: 45
Duration: 30
Description: Introduction to the main topic and key concepts
Reason: Sets the foundation for the entire video content
Score: 0.92

HIGHLIGHT 2:
Timestamp: 180
Duration: 25
Description: Detailed explanation of the core methodology
Reason: Contains the most valuable technical information
Score: 0.88

Now provide {count} highlights:"""


def translation_prompt(transcript: str, target_language: str) -> str:
    return f"""Translate the following text to {target_language}. Maintain the original meaning and tone.

Text:
{transcript}

Translation:"""
