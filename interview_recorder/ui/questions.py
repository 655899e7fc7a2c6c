"""The fixed, ordered interview question list known to the client."""

DEFAULT_QUESTIONS: tuple[str, ...] = (
    "Tell me about yourself.",
    "What interests you about our company?",
    "What is the most challenging model you've deployed and why?",
    "How do you detect and handle data drift in a live ML system?",
    "When would you choose a simpler model over a complex one?",
)
