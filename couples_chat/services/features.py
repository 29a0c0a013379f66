"""Map reply text to the platform features it mentions."""
from typing import Dict, List

# Keyword (lower-case substring) -> feature display name. Iteration order is
# the order of the returned list.
FEATURE_KEYWORDS: Dict[str, str] = {
    # Connection Building
    "love note": "Love Notes",
    "scheduled note": "Scheduled Love Notes",
    "ai content creator": "AI Content Creator",
    "content creator": "AI Content Creator",
    "poem": "AI Content Creator",
    "date idea": "Date Ideas",
    "date": "Date Ideas",
    "memory lane": "Memory Lane",
    "memory": "Memory Lane",
    "shared journal": "Shared Journals",
    "journal": "Shared Journals",
    "cooperative game": "Cooperative Games",
    "game": "Cooperative Games",
    "couples calendar": "Couples Calendar",
    "calendar": "Couples Calendar",
    # Relationship Growth
    "relationship goal": "Relationship Goals",
    "goal": "Relationship Goals",
    "milestone": "Milestones",
    "anniversary": "Milestones",
    "love language quiz": "Love Language Quiz",
    "love language": "Love Language Quiz",
    "relationship quiz": "Relationship Quizzes",
    "quiz": "Relationship Quizzes",
    "compatibility": "Relationship Quizzes",
    "couples dashboard": "Couples Dashboard",
    "dashboard": "Couples Dashboard",
    "progress tracking": "Progress Tracking",
    "progress": "Progress Tracking",
    # Communication & Support
    "ai relationship coach": "AI Relationship Coach",
    "ai coach": "AI Relationship Coach",
    "relationship coach": "AI Relationship Coach",
    "coach": "AI Relationship Coach",
    "communication practice": "Communication Practice",
    "communication": "Communication Practice",
    "meditation": "Meditation",
    "mindfulness": "Meditation",
    "counseling": "Counseling Support",
    "therapy": "Counseling Support",
    "therapist": "Counseling Support",
    "podcast": "Podcasts",
    "article": "Articles",
    "influencer": "Influencers",
    "expert": "Influencers",
    "chat": "Chat System",
    "messaging": "Chat System",
    # Community & Social
    "community": "Community",
    "forum": "Community",
    "find friends": "Find Friends",
    "friends": "Find Friends",
    "buddy system": "Buddy System",
    "buddy": "Buddy System",
    "success story": "Success Stories",
    "story": "Success Stories",
    "leaderboard": "Leaderboard",
    "ranking": "Leaderboard",
    "contest": "Win a Cruise",
    "cruise": "Win a Cruise",
    "prize": "Win a Cruise",
    # Gamification
    "achievement": "Achievements",
    "badge": "Achievements",
    "points system": "Points System",
    "points": "Points System",
    "premium feature": "Premium Features",
    "unlock": "Premium Features",
    "level": "Levels",
    # Inclusivity
    "lgbtq": "LGBTQ+ Support",
    "lgbt": "LGBTQ+ Support",
    "diversity": "Diversity Section",
    "inclusive": "Diversity Section",
}


def extract_features(text: str) -> List[str]:
    """Return distinct feature names whose keywords appear in text."""
    lower = (text or "").lower()
    suggested: List[str] = []
    for keyword, feature in FEATURE_KEYWORDS.items():
        if keyword in lower and feature not in suggested:
            suggested.append(feature)
    return suggested
