"""
Localized canned replies.

Every user-facing sentence the agents produce without asking a model
lives here, keyed by language. Lookups fall back to English for any
language the table does not carry.
"""
from typing import Dict, List

ENGLISH = "english"
URDU = "urdu"


def localized(table: Dict[str, str], language: str) -> str:
    """Pick the entry for a language, defaulting to English."""
    return table.get(language, table[ENGLISH])


SERVICE_UNAVAILABLE = {
    ENGLISH: "⚠️ Sorry, AI service is temporarily unavailable. Please try again in a moment.",
    URDU: "⚠️ معذرت، AI سروس عارضی طور پر دستیاب نہیں ہے۔ براہ کرم دوبارہ کوشش کریں۔",
}

EMPTY_REPLY = "I couldn't generate a response."


def unknown_medicine(query: str, language: str = ENGLISH) -> str:
    """Standard reply when a medicine name is not recognised."""
    if language == URDU:
        return f"""❌ **معذرت، میں "{query}" کے بارے میں نہیں جانتا**

میں نے اپنی میڈیکل ڈیٹا بیس میں "{query}" کے بارے میں کوئی معلومات نہیں ملی۔ یہ ممکن ہے کہ:

• دوا کا نام غلط لکھا گیا ہو
• یہ کوئی عام یا معروف دوا نہیں ہے
• یہ کسی خاص علاقے یا ملک کی دوا ہو

💡 **تجویز:** براہ کرم:
1. دوا کا نام دوبارہ چیک کریں
2. دوسرا نام استعمال کریں (برانڈ یا جنرک نام)
3. یا کسی معروف دوا کے بارے میں پوچھیں (مثلاً Panadol، Aspirin، Brufen)

⚠️ **نوٹ:** یہ صرف تعلیمی معلومات ہے، طبی مشورہ نہیں۔"""

    return f"""❌ **Sorry, I don't know about "{query}"**

I couldn't find any information about "{query}" in my medical database. This could mean:

• The medicine name might be misspelled
• It's not a commonly recognized medicine
• It might be a regional or country-specific medicine

💡 **Suggestion:** Please:
1. Double-check the spelling
2. Try a different name (brand name or generic name)
3. Or ask about a well-known medicine (e.g., Panadol, Aspirin, Brufen)

⚠️ **Note:** This is educational information only, not medical advice."""


# Orchestrator

MEDICAL_ADVICE_NOTICE = {
    ENGLISH: """**⚠️ IMPORTANT NOTICE ⚠️**
This system provides ONLY educational information about medicines. It does NOT provide medical advice, diagnoses, or treatment recommendations.

**Please consult with:**
- Your licensed healthcare provider
- A qualified pharmacist

**For any health concerns, always seek professional medical consultation.**""",
    URDU: """**⚠️ اہم اطلاع ⚠️**
یہ سسٹم صرف ادویات کی تعلیمی معلومات فراہم کرتا ہے۔ یہ طبی مشورہ، تشخیص، یا علاج تجویز نہیں کرتا۔

**براہ کرم مشورہ لیں:**
- اپنے لائسنس یافتہ ڈاکٹر سے
- کسی تجربہ کار فارماسسٹ سے

**صحت کے مسائل کے لیے ہمیشہ پیشہ ور طبی مشورہ لیں۔**""",
}

GENERAL_FALLBACK = {
    ENGLISH: "This assistant only explains recognised medicines. Please share the exact medicine name you want to learn about.",
    URDU: "یہ معاون صرف مخصوص ادویات کے بارے میں تعلیمی معلومات فراہم کرتا ہے۔ براہ کرم دوا کا واضح نام بتائیں تاکہ میں وضاحت کر سکوں۔",
}

ORCHESTRATOR_ERROR = (
    "I apologize, but I encountered an error while processing your medical query. "
    "Please try rephrasing your question or contact support if the issue persists."
)


def no_responses(query_type: str) -> str:
    return (
        f"I apologize, but I wasn't able to process your {query_type} query at this time. "
        "Please try rephrasing your question or contact support."
    )


# Drug information

DIRECT_ADVICE_NOTICE = {
    ENGLISH: """**⚠️ IMPORTANT MEDICAL NOTICE ⚠️**
This system only provides educational information about medicines. It cannot prescribe, recommend treatments, or decide what you should take.

Please speak with your licensed healthcare provider or a qualified pharmacist who can review your full medical history and give personalized medical advice.""",
    URDU: """**⚠️ اہم طبی اطلاع ⚠️**
یہ نظام صرف تعلیمی معلومات فراہم کرتا ہے۔ ہم طبی مشورہ، تشخیص، یا علاج کی تجاویز نہیں دے سکتے۔

براہ کرم اپنے قابل اعتماد، لائسنس یافتہ ہیلتھ کیئر فراہم کنندہ یا فارماسسٹ سے مشورہ کریں جو آپ کے مکمل طبی پس منظر کے مطابق رہنمائی کر سکے۔""",
}

DRUG_INFO_ERROR = {
    ENGLISH: "I'm sorry, I couldn't retrieve information about this medicine. Please try again with a clearer description.",
    URDU: "معذرت، میں اس دوا کی معلومات حاصل کرنے میں ناکام ہوں۔ براہ کرم دوبارہ کوشش کریں۔",
}

NO_MEDICINE_IN_IMAGE = {
    ENGLISH: "I didn't detect a recognizable medicine in this image. Please provide a clear photo of the pill or share the medicine name so I can explain it.",
    URDU: "مجھے اس تصویر میں کوئی واضح دوا نظر نہیں آئی۔ براہ کرم دوا کی صاف تصویر فراہم کریں یا نام لکھیں تاکہ میں وضاحت کر سکوں۔",
}


def api_configuration_required(medicine_name: str, language: str = ENGLISH) -> str:
    if language == URDU:
        return (
            f'⚠️ معذرت، میں "{medicine_name}" کی معلومات حاصل نہیں کر سکا۔ '
            "API configuration کی ضرورت ہے۔ براہ کرم منتظم سے رابطہ کریں۔"
        )
    return (
        f'⚠️ Sorry, I couldn\'t retrieve information about "{medicine_name}". '
        "API configuration is required. Please contact the administrator to set up API keys."
    )


CARD_LABELS = {
    ENGLISH: {
        "medicine_name": "💊 MEDICINE",
        "type": "📋 CATEGORY",
        "description": "📝 WHAT IT IS",
        "usage": "💡 USED FOR",
        "side_effects": "⚠️ SIDE EFFECTS",
        "warnings": "🚨 WARNINGS",
        "none": "Not available",
        "unnamed": "Unknown",
        "no_usage": "Not specified",
        "no_description": "Not available",
        "no_type": "General Medicine",
        "disclaimer": "⚠️ **IMPORTANT:** For educational purposes only. Always consult your doctor or pharmacist before taking any medication.",
    },
    URDU: {
        "medicine_name": "💊 دوائی کا نام",
        "type": "📋 قسم",
        "description": "📝 تفصیل",
        "usage": "💡 استعمال",
        "side_effects": "⚠️ ممکنہ ضمنی اثرات",
        "warnings": "🚨 اہم انتباہات",
        "none": "معلومات دستیاب نہیں",
        "unnamed": "نام دستیاب نہیں",
        "no_usage": "استعمال کی معلومات دستیاب نہیں",
        "no_description": "تفصیل دستیاب نہیں",
        "no_type": "معلوم نہیں",
        "disclaimer": "⚠️ **اہم:** یہ صرف تعلیمی معلومات ہے، طبی مشورہ نہیں۔ کوئی بھی دوا لینے سے پہلے اپنے ڈاکٹر یا فارماسسٹ سے مشورہ کریں۔",
    },
}


# Dosage

PERSONAL_DOSAGE_REFUSAL = {
    ENGLISH: "⚠️ I cannot provide personal medical advice. Please consult your doctor or pharmacist who can recommend the right dosage for your specific situation.",
    URDU: "⚠️ میں ذاتی طبی مشورہ فراہم نہیں کر سکتا۔ براہ کرم اپنے ڈاکٹر یا فارماسسٹ سے مشورہ کریں جو آپ کی مخصوص صورتحال کے لیے صحیح خوراک تجویز کر سکتے ہیں۔",
}

DOSAGE_ERROR = {
    ENGLISH: "I'm sorry, I couldn't provide dosage information. Please consult your healthcare provider for proper dosing guidance.",
    URDU: "معذرت، میں خوراک کی معلومات فراہم کرنے میں ناکام ہوں۔ براہ کرم اپنے ڈاکٹر سے مشورہ کریں۔",
}


# Interactions

INTERACTION_ERROR = {
    ENGLISH: "I'm sorry, I couldn't analyze the drug interactions. Please consult your healthcare provider for medication safety advice.",
    URDU: "معذرت، میں دوائیوں کی تعامل کا تجزیہ کرنے میں ناکام ہوں۔ براہ کرم اپنے ڈاکٹر سے مشورہ کریں۔",
}


# Side effects

SIDE_EFFECTS_ERROR = {
    ENGLISH: "I'm sorry, I couldn't provide side effects information. If you're experiencing unusual symptoms, please contact your healthcare provider immediately.",
    URDU: "معذرت، میں ضمنی اثرات کی معلومات فراہم کرنے میں ناکام ہوں۔ اگر آپ کو کوئی غیر معمولی علامات محسوس ہو رہی ہیں تو فوری طور پر ڈاکٹر سے رابطہ کریں۔",
}


# Documents

IMAGE_REQUIRED = {
    ENGLISH: "Please provide an image for this task.",
    URDU: "اس کام کے لیے براہ کرم ایک تصویر فراہم کریں۔",
}

DOCUMENT_UNREADABLE = {
    ENGLISH: "I'm sorry, I could not read this document clearly. Please provide a clearer image.",
    URDU: "معذرت، میں اس دستاویز کو واضح طور پر نہیں پڑھ سکا۔ براہ کرم ایک صاف تصویر فراہم کریں۔",
}

DOCUMENT_ERROR = {
    ENGLISH: "An error occurred while analyzing the document.",
    URDU: "معذرت، دستاویز کا تجزیہ کرتے وقت ایک خرابی واقع ہوئی۔",
}


def ocr_header(confidence: float, language: str = ENGLISH) -> str:
    percent = f"{confidence * 100:.0f}"
    if language == URDU:
        return f"دستاویز سے نکالی گئی عبارت (اعتماد: {percent}٪):"
    return f"Extracted text from document (Confidence: {percent}%):"


# Chat flow

CHAT_FALLBACK = {
    ENGLISH: "I'm sorry, I'm having difficulty processing your question. Please consult your healthcare provider for medical advice. **Important:** This information is for educational purposes only.",
    URDU: "معذرت، میں آپ کے سوال کا جواب دینے میں مشکل میں ہوں۔ براہ کرم اپنے ڈاکٹر سے مشورہ کریں۔ **اہم:** یہ معلومات صرف تعلیمی مقاصد کے لیے ہیں۔",
}

CHAT_FALLBACK_SUGGESTIONS: Dict[str, List[str]] = {
    ENGLISH: ["Please try rephrasing your question", "Consult your healthcare provider"],
    URDU: ["براہ کرم اپنا سوال دوبارہ پوچھیں", "اپنے ڈاکٹر سے مشورہ کریں۔"],
}

FOLLOW_UP_SUGGESTIONS: Dict[str, Dict[str, List[str]]] = {
    ENGLISH: {
        "medicine": ["Ask about side effects", "Check for drug interactions"],
        "drug_interaction": ["Ask about safe alternatives", "Discuss dosage adjustments with a doctor"],
        "dosage": ["What to do if I miss a dose?", "Ask about food interactions"],
        "side_effects": ["How to manage these side effects?", "When should I see a doctor?"],
        "report_analysis": ["What do these results mean for my health?", "What are the next steps?"],
        "default": ["Ask a more specific question", "Tell me more about..."],
    },
    URDU: {
        "medicine": ["اس کے ضمنی اثرات کے بارے میں پوچھیں", "دیگر ادویات کے ساتھ تعامل چیک کریں"],
        "drug_interaction": ["محفوظ متبادل کے بارے میں پوچھیں", "خوراک کی ایڈجسٹمنٹ پر ڈاکٹر سے بات کریں"],
        "dosage": ["اگر میں ایک خوراک چھوٹ جاؤں تو کیا کروں؟", "کھانے کے ساتھ تعامل کے بارے میں پوچھیں"],
        "side_effects": ["ان ضمنی اثرات کا انتظام کیسے کریں؟", "مجھے ڈاکٹر سے کب ملنا چاہئے؟"],
        "report_analysis": ["ان نتائج کا میری صحت کے لیے کیا مطلب ہے؟", "اگلے اقدامات کیا ہیں؟"],
        "default": ["ایک زیادہ مخصوص سوال پوچھیں", "مجھے مزید بتائیں..."],
    },
}
