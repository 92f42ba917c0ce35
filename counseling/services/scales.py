"""Psychometric scales: fixed questionnaires, their scoring and result storage.

A scale's score is the sum of the chosen option values, and its maximum is
the number of questions times the highest option value. Each scale reads its
score through its own bands. Some bands compare the raw score and others the
percentage of the maximum.
"""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from counseling.core.exceptions import NotFoundError, ValidationError
from counseling.models.scale import ScaleResult
from counseling.models.student import Student
from counseling.schemas.scale import (
    EducationStage,
    ScaleDefinition,
    ScaleInterpretation,
    ScaleOption,
    ScaleQuestion,
    ScaleResultCreate,
    ScaleResultResponse,
    ScaleScore,
)
from counseling.services.insights import school_today

logger = logging.getLogger(__name__)

# ==========================================
# Questionnaires
# ==========================================

FREQUENCY_OPTIONS = [
    ScaleOption(value=0, label="أبداً"),
    ScaleOption(value=1, label="نادراً"),
    ScaleOption(value=2, label="أحياناً"),
    ScaleOption(value=3, label="دائماً"),
]

BEHAVIOR_OPTIONS = [
    ScaleOption(value=1, label="أبداً"),
    ScaleOption(value=2, label="نادراً"),
    ScaleOption(value=3, label="أحياناً"),
    ScaleOption(value=4, label="غالباً"),
    ScaleOption(value=5, label="دائماً"),
]

LEARNING_MIDDLE_OPTIONS = [
    ScaleOption(value=0, label="أبداً"),
    ScaleOption(value=1, label="أحياناً"),
    ScaleOption(value=2, label="غالباً"),
    ScaleOption(value=3, label="دائماً"),
]


def _questions(*texts: str) -> list[ScaleQuestion]:
    return [ScaleQuestion(id=number, text=text) for number, text in enumerate(texts, start=1)]


EDUCATIONAL_BEHAVIOR = ScaleDefinition(
    id="educational_behavior_comprehensive",
    title="مقياس السلوك التربوي الشامل",
    description=(
        "تقييم شامل للسلوك التربوي عبر 5 أبعاد: الانضباط، السلوك الاجتماعي، "
        "المسؤولية، التحكم الانفعالي، والقيم."
    ),
    target_stages=[EducationStage.ELEMENTARY, EducationStage.MIDDLE, EducationStage.HIGH],
    options=BEHAVIOR_OPTIONS,
    questions=_questions(
        # Discipline
        "يلتزم بالتعليمات داخل القسم.",
        "يحترم أوقات الدخول والخروج.",
        "يحافظ على الهدوء أثناء الحصص.",
        "يتجنب السلوك الفوضوي أو المزعج.",
        "يمتثل لتعليمات المشرفين خارج القسم.",
        "يحافظ على النظام في الطابور والساحة.",
        # Social behavior
        "يتفاعل بإيجابية مع زملائه.",
        "يمد يد المساعدة عند الحاجة.",
        "يتواصل باحترام مع الآخرين.",
        "يتجنب الشجارات والمناوشات.",
        "يُظهر روح التعاون داخل القسم.",
        "يتقبل الاختلافات بين الزملاء.",
        # Responsibility
        "يحافظ على أدواته ودفاتره.",
        "يسلّم الواجبات في وقتها.",
        "يشارك بجدية في الأنشطة الصفية.",
        "يلتزم بإنجاز المهام المكلف بها.",
        "يظهر اهتمامًا بالتعلم.",
        "يعترف بالأخطاء ويحاول تصحيحها.",
        # Emotional control
        "يتحكم في غضبه داخل المؤسسة.",
        "يتجنب التلفظ بكلمات غير لائقة.",
        "يتعامل بهدوء في المواقف الضاغطة.",
        "يقبل النقد بدون انفعال زائد.",
        "يظهر قدرة على حل المشكلات دون شجار.",
        "لا يلجأ إلى العنف اللفظي أو الجسدي.",
        # Values
        "يحترم ممتلكات المؤسسة.",
        "يتحلى بالأمانة في تعاملاته.",
        "لا يغش في الامتحانات أو الواجبات.",
        "يحترم خصوصية الآخرين.",
        "يتحلى بالصدق في أقواله وأفعاله.",
        "يظهر سلوكًا يعكس القيم التربوية السليمة.",
    ),
)

ADHD_SHORT = ScaleDefinition(
    id="adhd_short",
    title="مقياس كونرز المختصر (ADHD)",
    description="تقييم أولي لعلامات فرط الحركة وتشتت الانتباه لدى الأطفال والمراهقين.",
    target_stages=[EducationStage.ELEMENTARY, EducationStage.MIDDLE],
    options=FREQUENCY_OPTIONS,
    questions=_questions(
        "كثير الحركة ولا يستقر في مكانه.",
        "يجد صعوبة في إتمام المهام التي تتطلب تركيزاً ذهنياً.",
        "سريع التشتت بالمؤثرات الخارجية.",
        "يندفع في الإجابة قبل اكتمال السؤال.",
        "يواجه صعوبة في انتظار دوره.",
        "يضيع أغراضه المدرسية باستمرار.",
        "يتحدث كثيراً وبشكل مفرط.",
        "يقاطع الآخرين ويتدخل في شؤونهم.",
    ),
)

LEARNING_DIFFICULTIES_ELEMENTARY = ScaleDefinition(
    id="learning_diff",
    title="قائمة مؤشرات صعوبات التعلم (الابتدائي)",
    description="رصد الصعوبات الأكاديمية والإدراكية التي قد تشير إلى صعوبات تعلم.",
    target_stages=[EducationStage.ELEMENTARY],
    options=FREQUENCY_OPTIONS,
    questions=_questions(
        "يجد صعوبة في الربط بين الحروف وأصواتها.",
        "يقرأ ببطء شديد ويرتكب أخطاء متكررة.",
        "يجد صعوبة في تذكر ما قرأه للتو.",
        "خطه رديء جداً وغير مقروء مقارنة بأقرانه.",
        "يخلط بين الرموز الرياضية (+ ، - ، ×).",
        "يجد صعوبة في فهم الاتجاهات (يمين، يسار، فوق، تحت).",
    ),
)

LEARNING_DIFFICULTIES_MIDDLE = ScaleDefinition(
    id="learning_diff_middle",
    title="مقياس مؤشرات صعوبات التعلم (المتوسط)",
    description="رصد الصعوبات الأكاديمية واستراتيجيات التعلم (40 بنداً شاملة).",
    target_stages=[EducationStage.MIDDLE],
    options=LEARNING_MIDDLE_OPTIONS,
    questions=_questions(
        # Attention and focus
        "يصعب عليه التركيز خلال الحصة أكثر من أقرانه.",
        "يتشتت بسهولة بواسطة الأصوات أو الحركة حوله.",
        "يبدأ مهمة ولا يكملها بدون تذكير مستمر.",
        "ينسى التعليمات متعددة الخطوات أو لا يتبعها.",
        "يظهر نشاطًا زائدًا أو قلقًا أثناء الجلوس المطلوب.",
        # Reading
        "يعثر على صعوبة في تعرف الكلمات أو نطقها.",
        "يقرأ ببطء وبجهد مقارنة بزملائه.",
        "يجد صعوبة في فهم ما قرأه (لا يستطيع إعادة سرد الفكرة الأساسية).",
        "يتخطى أسطرًا أو يكرر أسطرًا عند القراءة.",
        "يتهجّى الكلمات بشكل غير متسق.",
        # Writing
        "حروفه غير متناسقة أو صعبة القراءة.",
        "يواجه صعوبة في تنظيم أفكاره كتابة (جمل قصيرة غير مترابطة).",
        "أخطاء إملائية متكررة حتى في كلمات تعلمها.",
        "يستهلك وقتًا طويلًا لإكمال كتابة واجب بسيط.",
        "صعوبة في استخدام قواعد النحو البسيطة في الكتابة.",
        # Math
        "صعوبة في حفظ جداول الضرب أو قواعد حسابية بسيطة.",
        "يخطئ في مسائل تحتاج ترتيب خطوات بسيطة.",
        "يواجه صعوبة في فهم الرموز الرياضية.",
        "أخطاء متكررة في العمليات الحسابية البديهية.",
        "صعوبة في تقدير الكميات أو مفاهيم المكان/الترتيب.",
        # Oral language
        "يعبر بصعوبة عن أفكاره شفهياً بطريقة مفهومة.",
        "ينسى الكلمات أثناء الحديث أو يستبدلها بكلمات غير مناسبة.",
        "صعوبة في فهم الأسئلة المعقدة أو التعليقات الطويلة.",
        "مشاكل في نطق بعض الأصوات بوضوح.",
        "يستجيب بتأخر للمحادثات أو لا يتبع الحوار بسهولة.",
        # Memory
        "ينسى معلومات حديثة بعد لحظات (مثلاً تعليمات المعلم).",
        "يواجه صعوبة في تذكر تسلسل خطوات أو خطوات الواجب.",
        "يعتمد على التذكيرات المستمرة لتنفيذ المهام.",
        "ضعف في استدعاء معلومات محفوظة (تلميح لا يساعد كثيرًا).",
        "يخطئ في حفظ معلومات دراسية أساسية بالرغم من التدريب المتكرر.",
        # Executive functions
        "يعاني في تنظيم أدواته ودفاتره.",
        "يخطط قليلًا أو لا يخطط لتنفيذ مهمة بسيطة.",
        "يواجه صعوبة في البدء بالمهام (تأجيل مفرط).",
        "لا يلتزم بالمواعيد أو يفقد الأوراق باستمرار.",
        "يحتاج لتوجيه مستمر لتنظيم وقت إنجاز واجباته.",
        # Social and emotional
        "يظهر إحباطًا شديدًا أو يستسلم بسهولة عندما يواجه صعوبة تعلم.",
        "يتجنب المهام المدرسية خوفًا من الفشل.",
        "انخفاض الدافعية نحو التعلم مقارنة بزملائه.",
        "سلوك عدائي أو انسحاب اجتماعي مرتبط بالفشل الدراسي.",
        "شعور متكرر بالإحراج أو تراجع الثقة أثناء المواقف التعليمية.",
    ),
)

SCHOOL_ANXIETY = ScaleDefinition(
    id="anxiety",
    title="مقياس القلق المدرسي",
    description="قياس مستوى التوتر والخوف المرتبط بالبيئة المدرسية والامتحانات.",
    target_stages=[EducationStage.MIDDLE, EducationStage.HIGH],
    options=FREQUENCY_OPTIONS,
    questions=_questions(
        "يشعر بالغثيان أو ألم بالمعدة قبل الذهاب للمدرسة.",
        "يخاف بشدة من ارتكاب الأخطاء أمام المعلم.",
        "يتجنب المشاركة في الأنشطة الاجتماعية المدرسية.",
        "يعاني من تعرق اليدين أو سرعة دقات القلب عند الامتحانات.",
        "يجد صعوبة في التركيز بسبب القلق.",
    ),
)

SCALES = [
    EDUCATIONAL_BEHAVIOR,
    ADHD_SHORT,
    LEARNING_DIFFICULTIES_ELEMENTARY,
    LEARNING_DIFFICULTIES_MIDDLE,
    SCHOOL_ANXIETY,
]
SCALES_BY_ID = {scale.id: scale for scale in SCALES}


# ==========================================
# Interpretation bands
# ==========================================

def _below_percent(score: int, max_score: int, percent: int) -> bool:
    # Cross-multiplied so exact boundaries such as 9/15 = 60% are not lost to floats
    return score * 100 < percent * max_score


def _educational_behavior(score: int, max_score: int) -> ScaleInterpretation:
    if score >= 120:
        return ScaleInterpretation(
            level="سلوك تربوي ممتاز",
            tone="green",
            advice="الطالب يتمتع بمستوى عالٍ من الانضباط والمسؤولية. ينصح بتعزيز هذا السلوك وتشجيعه ليكون قدوة لزملائه.",
        )
    if score >= 90:
        return ScaleInterpretation(
            level="سلوك تربوي جيد",
            tone="blue",
            advice="سلوك الطالب جيد عموماً مع وجود بعض الهفوات البسيطة. ينصح بالمتابعة المستمرة للحفاظ على هذا المستوى.",
        )
    if score >= 60:
        return ScaleInterpretation(
            level="يحتاج دعماً وتوجيهاً",
            tone="orange",
            advice="توجد ملاحظات سلوكية متعددة. يحتاج الطالب إلى خطة توجيه فردية ومتابعة من المرشد التربوي.",
        )
    return ScaleInterpretation(
        level="يستدعي تدخلاً تربوياً",
        tone="red",
        advice=(
            "مستوى السلوك منخفض ويشير إلى مشاكل انضباطية أو نفسية. يتطلب تدخلاً عاجلاً "
            "من الفريق التربوي والنفسي واستدعاء الولي."
        ),
    )


def _adhd_short(score: int, max_score: int) -> ScaleInterpretation:
    if _below_percent(score, max_score, 40):
        return ScaleInterpretation(
            level="طبيعي", tone="green", advice="السلوك ضمن الحدود الطبيعية. لا يتطلب تدخلاً.",
        )
    if _below_percent(score, max_score, 70):
        return ScaleInterpretation(
            level="متوسط الاحتمالية",
            tone="orange",
            advice="توجد بعض المؤشرات. يوصى بمراقبة السلوك وتطبيق استراتيجيات تعديل السلوك داخل الفصل.",
        )
    return ScaleInterpretation(
        level="مرتفع الاحتمالية",
        tone="red",
        advice="مؤشرات قوية. يوصى بشدة بتحويل الطالب للمرشد النفسي أو المختص لإجراء تقييم شامل.",
    )


def _learning_difficulties_elementary(score: int, max_score: int) -> ScaleInterpretation:
    if _below_percent(score, max_score, 30):
        return ScaleInterpretation(level="منخفض", tone="green", advice="لا توجد مؤشرات واضحة لصعوبات التعلم.")
    if _below_percent(score, max_score, 60):
        return ScaleInterpretation(
            level="متوسط",
            tone="yellow",
            advice="قد يعاني من بطء تعلم أو تأخر دراسي بسيط. يحتاج لدعم إضافي في الدروس.",
        )
    return ScaleInterpretation(
        level="مرتفع",
        tone="red",
        advice="احتمالية وجود صعوبات تعلم نمائية أو أكاديمية. يرجى التنسيق مع معلم التربية الخاصة.",
    )


def _learning_difficulties_middle(score: int, max_score: int) -> ScaleInterpretation:
    # Raw-score ranges out of 120
    if score <= 24:
        return ScaleInterpretation(
            level="لا توجد دلائل قوية",
            tone="green",
            advice="السلوك ضمن النطاق الطبيعي. قد توجد مشاكل موضعية بسيطة تحتاج لملاحظة عابرة.",
        )
    if score <= 48:
        return ScaleInterpretation(
            level="دلائل طفيفة/محتملة",
            tone="yellow",
            advice=(
                "ينصح بتعديل استراتيجيات التدريس (تقصير التعليمات، توفير وقت إضافي) "
                "ودعم المعلم بتقنيات متعددة الحواس."
            ),
        )
    if score <= 84:
        return ScaleInterpretation(
            level="دلائل متوسطة",
            tone="orange",
            advice="يوصى بتخطيط تدخلات فردية وجلسات تقوية منظمة، والتواصل مع الولي لمتابعة المنزل.",
        )
    return ScaleInterpretation(
        level="دلائل شديدة",
        tone="red",
        advice=(
            "إحالة فورية للتقييم النفسي التربوي أو الأخصائي (نطق، طبيب مختص) "
            "لاستبعاد العوامل العضوية وتشخيص الحالة بدقة."
        ),
    )


def _school_anxiety(score: int, max_score: int) -> ScaleInterpretation:
    if _below_percent(score, max_score, 30):
        return ScaleInterpretation(level="قلق طبيعي", tone="green", advice="مستوى قلق طبيعي ودافع للإنجاز.")
    if _below_percent(score, max_score, 60):
        return ScaleInterpretation(
            level="قلق متوسط",
            tone="orange",
            advice="يحتاج الطالب لتعزيز الثقة بالنفس وتدريبه على تقنيات الاسترخاء.",
        )
    return ScaleInterpretation(
        level="قلق مرتفع",
        tone="red",
        advice="قد يعاني من رهاب مدرسي أو قلق عام. يتطلب جلسات إرشاد فردية.",
    )


INTERPRETERS = {
    EDUCATIONAL_BEHAVIOR.id: _educational_behavior,
    ADHD_SHORT.id: _adhd_short,
    LEARNING_DIFFICULTIES_ELEMENTARY.id: _learning_difficulties_elementary,
    LEARNING_DIFFICULTIES_MIDDLE.id: _learning_difficulties_middle,
    SCHOOL_ANXIETY.id: _school_anxiety,
}


# ==========================================
# Scoring
# ==========================================

def get_scale(scale_id: str) -> ScaleDefinition:
    scale = SCALES_BY_ID.get(scale_id)
    if scale is None:
        raise NotFoundError("Scale", scale_id)
    return scale


def interpret(scale_id: str, score: int) -> ScaleInterpretation:
    """Band reached by a total score on one scale."""
    scale = get_scale(scale_id)
    return INTERPRETERS[scale.id](score, scale.max_score)


def score_answers(scale_id: str, answers: dict[int, int]) -> ScaleScore:
    """Total and interpretation of a fully answered questionnaire.

    Every question must be answered with one of the scale's option values.
    """
    scale = get_scale(scale_id)
    question_ids = {q.id for q in scale.questions}
    allowed = {option.value for option in scale.options}

    unknown = sorted(set(answers) - question_ids)
    if unknown:
        raise ValidationError("Answers refer to unknown questions", details={"questions": unknown})

    unanswered = [q.id for q in scale.questions if q.id not in answers]
    if unanswered:
        raise ValidationError(
            "Every question must be answered",
            details={"unanswered": unanswered},
        )

    invalid = sorted(qid for qid, value in answers.items() if value not in allowed)
    if invalid:
        raise ValidationError(
            "Answers must use the scale's option values",
            details={"questions": invalid, "allowed": sorted(allowed)},
        )

    score = sum(answers.values())
    return ScaleScore(
        scale_id=scale.id,
        scale_title=scale.title,
        score=score,
        max_score=scale.max_score,
        interpretation=INTERPRETERS[scale.id](score, scale.max_score),
    )


class ScaleResultService:
    """Scores questionnaires and keeps the results per student."""

    def __init__(self, db: Session):
        self.db = db

    def _get_student(self, student_id: int) -> Student:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student", str(student_id))
        return student

    def save_result(self, student_id: int, request: ScaleResultCreate) -> ScaleResultResponse:
        student = self._get_student(student_id)
        scored = score_answers(request.scale_id, request.answers)

        result = ScaleResult(
            student_id=student.id,
            scale_id=scored.scale_id,
            scale_title=scored.scale_title,
            assessed_on=request.assessed_on or school_today(),
            score=scored.score,
            max_score=scored.max_score,
            level=scored.interpretation.level,
            advice=scored.interpretation.advice,
            answers={str(qid): value for qid, value in sorted(request.answers.items())},
        )
        self.db.add(result)
        self.db.flush()
        self.db.refresh(result)

        logger.info(
            f"[SCALES] {scored.scale_id} for student {student.id}: "
            f"{scored.score}/{scored.max_score} ({scored.interpretation.level})"
        )
        return ScaleResultResponse.model_validate(result)

    def list_for_student(self, student_id: int) -> list[ScaleResultResponse]:
        """Saved results of one student, newest first."""
        self._get_student(student_id)
        result = self.db.execute(
            select(ScaleResult)
            .where(ScaleResult.student_id == student_id)
            .order_by(ScaleResult.assessed_on.desc(), ScaleResult.id.desc())
        )
        return [ScaleResultResponse.model_validate(r) for r in result.scalars().all()]
