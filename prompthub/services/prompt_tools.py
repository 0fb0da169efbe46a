"""Single-vendor helpers behind /api/ai/generate and /api/ai/format-prompt (Groq)."""
import logging

from prompthub.core.errors import ValidationError

logger = logging.getLogger(__name__)

FORMAT_MODEL = "llama-3.1-8b-instant"

DEFAULT_FORMAT_INSTRUCTION = (
    "Format this prompt to follow industry best practices. Improve clarity, structure, "
    "and effectiveness while maintaining the original intent. Make it more professional "
    "and well-structured."
)

FORMAT_SYSTEM_PROMPT = """You are a prompt engineering expert. Format the given prompt according to these rules:
1. Improve clarity and readability
2. Maintain the original intent and purpose
3. Use proper structure and formatting
4. Make it more effective for AI models
5. Keep it concise but comprehensive
6. Give a suggestion for improvement

Return only the formatted prompt without any additional explanations."""


class PromptTools:
    def __init__(self, adapters, kind: str = "groq"):
        self.adapters = adapters
        self.kind = kind

    def _adapter(self):
        # complete() only exists on chat-style adapters
        return self.adapters.resolve(self.kind)

    def generate(self, prompt: str, model: str = FORMAT_MODEL, max_tokens: int = 1024):
        if not prompt or not prompt.strip():
            raise ValidationError("prompt", "Prompt is required")

        return self._adapter().complete(
            [{"role": "user", "content": prompt}],
            model=model,
            max_tokens=max_tokens,
            temperature=0.7,
            top_p=0.9,
        )

    def format_prompt(self, prompt: str, instruction: str = None):
        if not prompt or not prompt.strip():
            raise ValidationError("prompt", "Prompt is required")

        instruction = instruction or DEFAULT_FORMAT_INSTRUCTION
        reply = self._adapter().complete(
            [
                {"role": "system", "content": FORMAT_SYSTEM_PROMPT},
                {"role": "user", "content": f"Original prompt: {prompt}\n\nInstruction: {instruction}"},
            ],
            model=FORMAT_MODEL,
            max_tokens=2048,
            # Lower temperature keeps formatting consistent
            temperature=0.3,
        )
        reply.response_text = reply.response_text.strip()
        return reply
