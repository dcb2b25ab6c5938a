"""Pattern-based classification of financial questions."""
import re
from typing import List, Sequence, Tuple

from .models import ClassificationBundle, QueryComplexity
from finadvisor.utils.logger import get_logger

logger = get_logger()


def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


# First match wins, in this order
QUESTION_TYPE_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("educational", _compile(r"\b(what is(?! the difference)|explain|how does|tell me about|describe|define)\b")),
    ("comparative", _compile(r"\b(difference|differ|vs|versus|compare|better|worse|comparison|which is)\b")),
    ("advisory", _compile(r"\b(should i|recommend|advice|suggest|best way|how to|how can i|what should)\b")),
    ("calculative", _compile(r"\b(calculate|how much|returns|profit|loss|percentage)\b")),
    ("planning", _compile(r"\b(future|plan|goal|retirement|tax|insurance|long.term|short.term)\b")),
]

INTENT_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("growth", _compile(r"\b(grow|increase|multiply|build wealth|make money|earn more|returns)\b")),
    ("preservation", _compile(r"\b(safe|secure|protect|risk.free|guaranteed|stable)\b")),
    ("risk_management", _compile(r"\b(risk|volatility|market crash|loss|protect|hedge)\b")),
    ("education", _compile(r"\b(learn|understand|explain|what is|how does)\b")),
    ("comparison", _compile(r"\b(better|worse|vs|versus|difference|compare)\b")),
]

TOPIC_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("investment", _compile(
        r"\b(grow\w*|increase|multiply|compound\w*|returns?|profits?|capital|portfolio)\b"
        r"|\b(stocks?|equity|equities|bonds?|mutual.funds?|sip|trading|market|invest\w*|wealth)\b"
    )),
    ("savings", _compile(
        r"\b(save|saves|saved|saving|savings|emergency.fund|budget\w*|expenses?|cut.costs?|reduce|frugal)\b"
        r"|\b(bank.account|savings.account|deposits?|cash|money.stored)\b"
    )),
    ("debt", _compile(
        r"\b(debts?|loans?|credit.cards?|interest|pay.off|borrow\w*|lenders?|mortgage)\b"
        r"|\b(owe|owed|owing|liability|liabilities|payments?|installments?)\b"
    )),
    ("risk", _compile(
        r"\b(risk\w*|safe|secure|protect\w*|insurance|hedge|diversify|volatility)\b"
        r"|\b(loss|losses|crash|downfall|unstable|uncertain|guarantee\w*)\b"
    )),
    ("planning", _compile(
        r"\b(plan|plans|planning|goals?|future|retirement|tax|insurance|education|marriage)\b"
        r"|\b(long.term|short.term|strategy|objective|target|milestone)\b"
    )),
    ("income", _compile(
        r"\b(income|salary|earn|earns|earned|job|business|passive|side.hustle|freelance)\b"
        r"|\b(money.in|revenue|earning|compensation|wages?)\b"
    )),
    ("spending", _compile(
        r"\b(spend|spends|spending|spent|expense|buy|purchases?|cost|costs|price|shopping|consumption)\b"
        r"|\b(money.out|expenditure|outflow|payments?|bills?)\b"
    )),
]

CONCEPT_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("mutual_fund", _compile(r"\b(mutual.funds?|m.f|sip|systematic.investment.plan)\b")),
    ("fixed_deposit", _compile(r"\b(fixed.deposits?|fds?|term.deposits?)\b")),
    ("stock", _compile(r"\b(stocks?|equity|shares?|trading|demat)\b")),
    ("bond", _compile(r"\b(bonds?|debentures?|government.securities)\b")),
    ("insurance", _compile(r"\b(insurance|life.insurance|health.insurance|term.insurance)\b")),
    ("tax", _compile(r"\b(tax|taxes|income.tax|capital.gains|deductions?|80c)\b")),
    ("inflation", _compile(r"\b(inflation|price.rise|cost.of.living|erosion)\b")),
    ("compound_interest", _compile(r"\b(compound.interest|power.of.compounding)\b")),
    ("emergency_fund", _compile(r"\b(emergency.fund|contingency|backup|reserve)\b")),
    ("diversification", _compile(r"\b(diversify|diversification|spread.risk|asset.allocation)\b")),
]

# Questions about companies, public figures or general knowledge
EXTERNAL_ENTITY_PATTERNS = [
    _compile(r"\b(who is|who are|who was)\b"),
    _compile(r"\bwhat is .*(company|stock|tesla|apple|google|amazon|microsoft|reliance|tata)"),
    _compile(r"\btell me about .*(him|her|them|it|company|person|ceo|founder)\b"),
    _compile(r"\b(his|her|their|its)\s"),
    _compile(r"\b(elon|musk|ambani|bezos|gates|zuckerberg|buffett)\b"),
    _compile(r"^(what|who|when|where|why|how) (is|are|was|were|did|does|do) (the|a|an|this|that)\b"),
]

FIRST_PERSON_PATTERN = _compile(r"\b(my|i|i'm|i've|i'd|me|mine)\b")

PERSONAL_FINANCE_KEYWORDS = (
    "my money", "my expenses", "my spending", "my budget", "my savings",
    "my income", "my salary", "my finances", "my financial", "my debt",
    "my account", "my investment", "my portfolio",
    "i spend", "i spent", "i save", "i saved", "i earn", "i earned",
    "i owe", "i paid", "i bought", "i invested",
    "am i spending", "should i save", "should i invest", "should i buy",
    "can i afford", "how do i save", "how can i save", "help me save",
    "reduce my", "cut my", "improve my", "analyze my", "review my",
)

PERSONAL_FINANCE_PATTERNS = [
    _compile(r"how (much|many).*(did )?(i |my )(spend|spent|save|saved|earn|earned)"),
    _compile(r"what.*(did )?(i |my ).*(spend|expense|budget|saving|income)"),
    _compile(r"where.*(did )?(i |my ).*(money|spend)"),
    _compile(r"show.*(my|me).*(expense|spending|budget|saving|data|analysis)"),
    _compile(r"analy[sz]e.*\b(my|me)\b"),
    _compile(r"give me.*(advice|tips|suggestion).*(money|finance|save|budget|spend)"),
    _compile(r"help me.*(save|budget|spend|invest|manage)"),
    _compile(r"(advice|tips|suggestion) for (my|me)\b"),
    _compile(r"\b(based on|according to|looking at) my\b"),
]

REALTIME_PATTERNS = [
    _compile(r"\b(stock|share|market)\s*(price|rate|value|today|current|now|live)"),
    _compile(r"\b(price|rate|value)\s*(of|for).*(stock|share|nse|bse)"),
    _compile(r"\b(today|current|now|live|latest)\s*(price|rate|market|stock)"),
    _compile(r"\b(nse|bse|nasdaq|nyse)\s*(price|rate)"),
    _compile(r"\b(reliance|tcs|infosys|hdfc|icici|sbi|tata|wipro|bharti|itc|kotak)\b.*\b(price|stock|share)"),
    _compile(r"\b(tesla|apple|google|amazon|microsoft|nvidia|meta)\b.*\b(price|stock|share)"),
    _compile(r"what.*(today|current|now).*(price|rate|stock|market)"),
    _compile(r"tell me.*(today|current|live).*(price|stock|market)"),
    _compile(r"\b(latest|recent|today|current)\s*(news|update|announcement)"),
    _compile(r"what.*(happening|news|update).*(market|stock|economy)"),
]

COMPARISON_PATTERN = _compile(r"\b(vs|versus|compare|better|worse|difference)\b")
TECHNICAL_TERMS_PATTERN = _compile(
    r"\b(market|portfolio|diversification|compound|interest|mutual|fund|stock|bond|fd|sip)\b"
)

BASE_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.9


def classify(question: str) -> ClassificationBundle:
    """
    Classify a free-text question.

    Args:
        question: The user's question

    Returns:
        ClassificationBundle; unmatched questions resolve to "general"
    """
    text = question.strip().lower()

    topics = extract_topics(text)
    concepts = recognize_concepts(text)
    bundle = ClassificationBundle(
        question=question,
        question_type=classify_question_type(text),
        intents=analyze_intents(text),
        topics=topics,
        concepts=concepts,
        confidence=confidence_score(topics, concepts),
        is_personal_finance=is_personal_finance(text)
    )

    logger.debug(
        f"Classified question as {bundle.question_type} "
        f"(intents={list(bundle.intents)}, topics={list(bundle.topics)}, "
        f"concepts={list(bundle.concepts)}, confidence={bundle.confidence}, "
        f"personal={bundle.is_personal_finance})"
    )
    return bundle


def classify_question_type(text: str) -> str:
    for question_type, pattern in QUESTION_TYPE_PATTERNS:
        if pattern.search(text):
            return question_type
    return "general"


def _matching_labels(text: str, table: Sequence[Tuple[str, re.Pattern]]) -> Tuple[str, ...]:
    return tuple(label for label, pattern in table if pattern.search(text))


def analyze_intents(text: str) -> Tuple[str, ...]:
    return _matching_labels(text, INTENT_PATTERNS) or ("general",)


def extract_topics(text: str) -> Tuple[str, ...]:
    return _matching_labels(text, TOPIC_PATTERNS) or ("general",)


def recognize_concepts(text: str) -> Tuple[str, ...]:
    return _matching_labels(text, CONCEPT_PATTERNS)


def confidence_score(topics: Sequence[str], concepts: Sequence[str]) -> float:
    """Additive heuristic, capped below certainty."""
    score = BASE_CONFIDENCE
    if len(topics) > 1:
        score += 0.2
    if len(topics) > 2:
        score += 0.1
    if len(concepts) > 0:
        score += 0.2
    if len(concepts) > 1:
        score += 0.1
    return round(min(score, MAX_CONFIDENCE), 2)


def is_personal_finance(text: str) -> bool:
    """
    True when the question is about the user's own money.

    An external-entity reference without first-person language forces False
    regardless of keyword hits.
    """
    text = text.lower()
    about_external = any(pattern.search(text) for pattern in EXTERNAL_ENTITY_PATTERNS)
    mentions_user = FIRST_PERSON_PATTERN.search(text) is not None
    if about_external and not mentions_user:
        return False

    if any(keyword in text for keyword in PERSONAL_FINANCE_KEYWORDS):
        return True
    return any(pattern.search(text) for pattern in PERSONAL_FINANCE_PATTERNS)


def needs_realtime_data(question: str) -> bool:
    """True when answering requires live market prices or news."""
    return any(pattern.search(question) for pattern in REALTIME_PATTERNS)


def assess_complexity(question: str) -> QueryComplexity:
    has_comparisons = COMPARISON_PATTERN.search(question) is not None
    has_technical_terms = TECHNICAL_TERMS_PATTERN.search(question) is not None

    if len(question) > 200 or has_comparisons or has_technical_terms:
        estimated = "high"
    elif len(question) < 50:
        estimated = "low"
    else:
        estimated = "medium"

    return QueryComplexity(
        length=len(question),
        has_numbers=re.search(r"\d", question) is not None,
        has_comparisons=has_comparisons,
        has_technical_terms=has_technical_terms,
        estimated=estimated
    )
