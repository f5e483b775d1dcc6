from __future__ import annotations

from typing import Any


FALLBACK_TEXT = (
    "I understand your request. This is a mock response from the Vertex AI Gemini API. "
    "In a real implementation, I would provide a more specific and helpful response based on your input."
)


def _payload(parts: list[dict[str, Any]], prompt_tokens: int, candidate_tokens: int) -> dict[str, Any]:
    return {
        "candidates": [
            {
                "content": {"parts": parts, "role": "model"},
                "finishReason": "STOP",
                "index": 0,
            }
        ],
        "usageMetadata": {
            "promptTokenCount": prompt_tokens,
            "candidatesTokenCount": candidate_tokens,
            "totalTokenCount": prompt_tokens + candidate_tokens,
        },
    }


def _preset(
    preset_id: str,
    name: str,
    description: str,
    keyword: str,
    parts: list[dict[str, Any]],
    prompt_tokens: int,
    candidate_tokens: int,
) -> dict[str, Any]:
    return {
        "id": preset_id,
        "name": name,
        "description": description,
        "trigger": {"type": "contains", "value": keyword},
        "response": _payload(parts, prompt_tokens, candidate_tokens),
    }


FIBONACCI_SNIPPET = (
    'print("Hello from Python!")\n'
    "result = 2 + 2\n"
    'print(f"2 + 2 = {result}")\n'
    "\n"
    "# Calculate fibonacci\n"
    "def fibonacci(n):\n"
    "    if n <= 1:\n"
    "        return n\n"
    "    return fibonacci(n-1) + fibonacci(n-2)\n"
    "\n"
    'print(f"Fibonacci of 5: {fibonacci(5)}")'
)

RECIPES_JSON = (
    '[{"recipeName": "Chocolate Chip Cookies", "ingredients": ["2 cups flour", "1 cup butter", "1/2 cup sugar", '
    '"1/2 cup brown sugar", "2 eggs", "1 tsp vanilla", "1 tsp baking soda", "1/2 tsp salt", "2 cups chocolate chips"], '
    '"instructions": ["Preheat oven to 375°F", "Mix dry ingredients", "Cream butter and sugars", '
    '"Add eggs and vanilla", "Combine wet and dry ingredients", "Fold in chocolate chips", "Drop on baking sheet", '
    '"Bake 9-11 minutes"]}, {"recipeName": "Peanut Butter Cookies", "ingredients": ["1 cup peanut butter", '
    '"1/2 cup sugar", "1/2 cup brown sugar", "1 egg", "1 tsp vanilla", "1 cup flour", "1/2 tsp baking soda", '
    '"1/4 tsp salt"], "instructions": ["Preheat oven to 350°F", "Mix peanut butter and sugars", '
    '"Add egg and vanilla", "Mix in dry ingredients", "Roll into balls", "Place on baking sheet", '
    '"Press with fork", "Bake 10-12 minutes"]}]'
)

CHARACTERS_JSON = (
    '[{"name": "Aria Blackwood", "age": 28, "occupation": "Archer", "background": "A skilled ranger from the '
    "northern forests, Aria is known for her exceptional marksmanship and deep connection to nature. She left her "
    'homeland to seek adventure and help those in need.", "playable": true, "children": []}, {"name": "Marcus '
    'Steel", "age": 45, "occupation": "Blacksmith", "background": "A master craftsman who has dedicated his life '
    "to forging the finest weapons and armor. Marcus runs the local smithy and is respected throughout the village "
    'for his skill and wisdom.", "playable": false, "children": [{"name": "Elena Steel", "age": 16}, '
    '{"name": "Thomas Steel", "age": 14}]}]'
)

LOG_EXTRACT_JSON = (
    '[{"timestamp": "15:43:28", "error_code": 308, "error_message": "Could not process image upload: Unsupported '
    'file format."}, {"timestamp": "15:45:02", "error_code": 5522, "error_message": "Service dependency unavailable '
    '(payment gateway). Retrying..."}, {"timestamp": "15:45:33", "error_code": 9001, "error_message": "Application '
    'crashed due to out-of-memory exception."}]'
)


def default_presets() -> list[dict[str, Any]]:
    """Fresh copy of the startup preset table, in match-priority order."""
    return [
        _preset(
            "greeting",
            "Greeting Response",
            "Friendly greeting response",
            "hello",
            [
                {
                    "text": "Hello! How can I help you today? I'm here to assist you with any questions "
                    "or tasks you might have."
                }
            ],
            3,
            25,
        ),
        _preset(
            "grounding-search",
            "Web Search Grounding",
            "Response that triggers web search grounding",
            "what is",
            [
                {
                    "text": "I can help you find current information about that topic. "
                    "Let me search the web for the latest details."
                }
            ],
            8,
            20,
        ),
        _preset(
            "code-execution",
            "Code Execution Example",
            "Response with executable Python code",
            "python code",
            [
                {"text": "Here's a Python code example that I can execute:"},
                {"executableCode": {"language": "PYTHON", "code": FIBONACCI_SNIPPET}},
            ],
            12,
            30,
        ),
        _preset(
            "coding-help",
            "Coding Assistance",
            "Helpful coding responses",
            "code",
            [
                {
                    "text": "I'd be happy to help you with coding! Here's a simple example:\n\n```javascript\n"
                    "function greet(name) {\n  return `Hello, ${name}!`;\n}\n\nconsole.log(greet(\"World\"));\n"
                    "```\n\nThis function takes a name parameter and returns a greeting message. Is there a "
                    "specific programming language or concept you'd like help with?"
                }
            ],
            4,
            65,
        ),
        _preset(
            "image-analysis",
            "Image Analysis",
            "Responses for image analysis requests",
            "image",
            [
                {
                    "text": "I can see you're asking about image analysis! I can help you understand and analyze "
                    "images. I can describe what I see in images, identify objects, read text, analyze charts and "
                    "graphs, and much more. Please share an image and tell me what you'd like to know about it!"
                }
            ],
            4,
            52,
        ),
        _preset(
            "recipe-json",
            "Recipe JSON Response",
            "Structured recipe list",
            "recipe",
            [{"text": RECIPES_JSON}],
            10,
            150,
        ),
        _preset(
            "sentiment-enum",
            "Sentiment Classification",
            "Enum sentiment answer",
            "sentiment",
            [{"text": "POSITIVE"}],
            8,
            1,
        ),
        _preset(
            "character-generation",
            "Character Generation",
            "Structured game characters",
            "character",
            [{"text": CHARACTERS_JSON}],
            12,
            140,
        ),
        _preset(
            "data-extraction",
            "Log Data Extraction",
            "Structured fields extracted from log lines",
            "extract",
            [{"text": LOG_EXTRACT_JSON}],
            40,
            90,
        ),
        _preset(
            "multimodal-analysis",
            "Multimodal Analysis",
            "Capabilities across text, image, audio and video",
            "analyze",
            [
                {
                    "text": "I can analyze various types of content including text, images, audio, and video. "
                    "For images, I can identify objects, read text, describe scenes, and analyze charts. For "
                    "audio, I can transcribe speech and identify sounds. For video, I can describe actions and "
                    "scenes. What would you like me to analyze?"
                }
            ],
            5,
            60,
        ),
        _preset(
            "creative-writing",
            "Creative Writing",
            "Short story opening",
            "story",
            [
                {
                    "text": "I'd love to help you with creative writing! Here's a short story beginning:\n\n"
                    "**The Last Library**\n\nIn a world where books had been forgotten, Maya discovered a hidden "
                    "room behind her grandmother's old bookshelf. Dust particles danced in the golden light "
                    "streaming through a cracked window, illuminating rows upon rows of leather-bound volumes. As "
                    "she reached for the nearest book, its pages rustled like whispered secrets, and she realized "
                    "she might be holding the key to restoring knowledge to her world.\n\nWould you like me to "
                    "continue this story, or would you prefer to explore a different creative writing topic?"
                }
            ],
            5,
            120,
        ),
        _preset(
            "technical-explanation",
            "Technical Explanation",
            "Offer to explain technical concepts",
            "explain",
            [
                {
                    "text": "I'd be happy to explain technical concepts! I can break down complex topics into "
                    "understandable explanations, provide examples, and walk through step-by-step processes. "
                    "Whether you're interested in programming, science, mathematics, technology, or any other "
                    "technical field, I can help make it clear and accessible. What would you like me to explain?"
                }
            ],
            5,
            70,
        ),
    ]


def fallback_response() -> dict[str, Any]:
    return _payload([{"text": FALLBACK_TEXT}], 25, 35)
