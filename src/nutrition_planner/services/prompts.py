"""Prompt construction for plan generation."""

import json
from dataclasses import dataclass

from nutrition_planner.domain.generation import GenerationPurpose, GenerationRequest
from nutrition_planner.domain.plans import MEAL_SLOTS
from nutrition_planner.domain.profiles import ClientProfile, Locale
from nutrition_planner.domain.targets import NutritionTargets

PLAN_DAYS = 30


@dataclass(frozen=True)
class _PromptCopy:
    """Locale-specific wording of the generation instructions."""

    system: str
    diagnostic_system: str
    intro: str
    profile_heading: str
    targets_heading: str
    requirements_heading: str
    format_heading: str
    labels: dict[str, str]
    target_labels: dict[str, str]
    requirements: tuple[str, ...]
    closing: str
    diagnostic_task: str
    example_week_theme: str
    example_meal_name: str


_COPY: dict[Locale, _PromptCopy] = {
    Locale.EN: _PromptCopy(
        system=(
            "You are Dr. Jackie, a world-class nutritionist and fitness expert "
            "with 15 years of experience. You create personalized, science-based "
            "30-day diet plans that are practical, delicious, and tailored to each "
            "client's specific needs, goals, and lifestyle. Always respond with "
            "valid JSON."
        ),
        diagnostic_system=(
            "You are Dr. Jackie. Respond with a short JSON analysis of a client "
            "profile."
        ),
        intro=(
            "Create a comprehensive, personalized {days}-day diet plan for this "
            "client. Respond in English (US) and format the answer as valid JSON."
        ),
        profile_heading="## CLIENT PROFILE:",
        targets_heading="## NUTRITIONAL REQUIREMENTS:",
        requirements_heading="## REQUIREMENTS:",
        format_heading="## JSON RESPONSE FORMAT:",
        labels={
            "name": "Name",
            "age": "Age (years)",
            "sex": "Sex",
            "height_cm": "Height (cm)",
            "weight_kg": "Weight (kg)",
            "goal": "Primary goal",
            "activity_level": "Activity level",
            "restrictions": "Dietary restrictions",
            "allergies": "Allergies",
            "medical_conditions": "Medical conditions",
            "current_diet": "Current diet",
            "water_intake": "Water intake",
            "sleep_hours": "Sleep (hours)",
            "stress_level": "Stress level",
            "budget": "Budget",
            "cooking_time": "Cooking time available",
        },
        target_labels={
            "bmr": "BMR",
            "total_calories": "Total daily calories",
            "protein": "Protein",
            "carbs": "Carbohydrates",
            "fats": "Fats",
        },
        requirements=(
            "Create exactly {days} days of meal plans, grouped into weekly themes.",
            "Each day must have 6 meals, using these types: {slots}.",
            "Each meal lists its ingredients with quantity and calories per item.",
            "Provide cooking instructions and a timing suggestion for each meal.",
            "Give each meal a macro breakdown (protein, carbs, fats in grams).",
            "Add daily hydration goals and an optional exercise suggestion.",
            "Include supplement recommendations, lifestyle tips and warnings.",
            "Prefer foods that are easy to find in the USA.",
            "Keep recipes practical for the client's cooking time and budget.",
        ),
        closing=(
            "Make this plan practical and tailored to {name}'s goal ({goal}), "
            "respecting every restriction and allergy listed above."
        ),
        diagnostic_task=(
            "Write a brief analysis of this client and one simple diet "
            'suggestion as JSON with the keys "analysis" and "suggestion". '
            "Respond in English and keep it very short."
        ),
        example_week_theme="Getting Started - Building Healthy Habits",
        example_meal_name="Nutritious breakfast name",
    ),
    Locale.PT: _PromptCopy(
        system=(
            "Você é a Dra. Jackie, nutricionista e especialista em fitness de "
            "nível mundial com 15 anos de experiência. Você cria planos "
            "alimentares de 30 dias personalizados, baseados em ciência, "
            "práticos, saborosos e adaptados às necessidades, objetivos e estilo "
            "de vida de cada cliente. Responda sempre com JSON válido."
        ),
        diagnostic_system=(
            "Você é a Dra. Jackie. Responda com uma análise curta em JSON de um "
            "perfil de cliente."
        ),
        intro=(
            "Crie um plano alimentar completo e personalizado de {days} dias "
            "para esta cliente. Responda em português brasileiro e formate a "
            "resposta como JSON válido."
        ),
        profile_heading="## PERFIL DA CLIENTE:",
        targets_heading="## NECESSIDADES NUTRICIONAIS:",
        requirements_heading="## REQUISITOS:",
        format_heading="## FORMATO DA RESPOSTA JSON:",
        labels={
            "name": "Nome",
            "age": "Idade (anos)",
            "sex": "Sexo",
            "height_cm": "Altura (cm)",
            "weight_kg": "Peso (kg)",
            "goal": "Objetivo principal",
            "activity_level": "Nível de atividade",
            "restrictions": "Restrições alimentares",
            "allergies": "Alergias",
            "medical_conditions": "Condições médicas",
            "current_diet": "Dieta atual",
            "water_intake": "Consumo de água",
            "sleep_hours": "Sono (horas)",
            "stress_level": "Nível de estresse",
            "budget": "Orçamento",
            "cooking_time": "Tempo disponível para cozinhar",
        },
        target_labels={
            "bmr": "TMB",
            "total_calories": "Calorias diárias totais",
            "protein": "Proteínas",
            "carbs": "Carboidratos",
            "fats": "Gorduras",
        },
        requirements=(
            "Crie exatamente {days} dias de refeições, agrupados em temas semanais.",
            "Cada dia deve ter 6 refeições, usando estes tipos: {slots}.",
            "Cada refeição lista os ingredientes com quantidade e calorias por item.",
            "Inclua modo de preparo e sugestão de horário para cada refeição.",
            "Informe os macros de cada refeição em gramas "
            "(proteínas, carboidratos, gorduras).",
            "Adicione metas diárias de hidratação e uma sugestão de exercício.",
            "Inclua recomendações de suplementos, dicas de estilo de vida e alertas.",
            "Prefira alimentos fáceis de encontrar no Brasil.",
            "Mantenha as receitas práticas para o tempo e o orçamento da cliente.",
        ),
        closing=(
            "Faça este plano prático e adaptado ao objetivo de {name} ({goal}), "
            "respeitando todas as restrições e alergias listadas acima."
        ),
        diagnostic_task=(
            "Escreva uma análise breve desta cliente e uma sugestão alimentar "
            'simples em JSON com as chaves "analysis" e "suggestion". '
            "Responda em português e seja bem breve."
        ),
        example_week_theme="Começando - Construindo hábitos saudáveis",
        example_meal_name="Nome do café da manhã nutritivo",
    ),
}


def build_generation_request(
    profile: ClientProfile,
    targets: NutritionTargets,
    max_output_tokens: int,
) -> GenerationRequest:
    """Render the full plan-generation instructions for a client."""
    copy = _COPY[profile.locale]
    schema = output_schema_example(targets, copy)
    requirements = "\n".join(
        f"{index}. {line.format(days=PLAN_DAYS, slots=', '.join(MEAL_SLOTS))}"
        for index, line in enumerate(copy.requirements, start=1)
    )
    sections = [
        copy.intro.format(days=PLAN_DAYS),
        copy.profile_heading,
        _render_profile(profile, copy),
        copy.targets_heading,
        _render_targets(targets, copy),
        copy.requirements_heading,
        requirements,
        copy.format_heading,
        schema,
        copy.closing.format(name=profile.name, goal=profile.goal.value),
    ]
    return GenerationRequest(
        locale=profile.locale,
        system_instruction=copy.system,
        user_instruction="\n\n".join(sections),
        output_schema=schema,
        max_output_tokens=max_output_tokens,
        purpose=GenerationPurpose.PLAN,
    )


def build_diagnostic_request(
    profile: ClientProfile, max_output_tokens: int
) -> GenerationRequest:
    """Render a cheap diagnostic request exercising the provider path."""
    copy = _COPY[profile.locale]
    schema = json.dumps({"analysis": "...", "suggestion": "..."}, indent=2)
    user_instruction = "\n\n".join(
        [copy.diagnostic_task, _render_profile(profile, copy), schema]
    )
    return GenerationRequest(
        locale=profile.locale,
        system_instruction=copy.diagnostic_system,
        user_instruction=user_instruction,
        output_schema=schema,
        max_output_tokens=max_output_tokens,
        purpose=GenerationPurpose.DIAGNOSTIC,
    )


def output_schema_example(targets: NutritionTargets, copy: _PromptCopy) -> str:
    """Return a literal example of the expected JSON answer."""
    example = {
        "overview": {
            "duration": f"{PLAN_DAYS} days",
            "totalCalories": targets.total_calories,
            "macros": {
                "protein": targets.protein_g,
                "carbs": targets.carbs_g,
                "fats": targets.fats_g,
            },
            "goals": ["Primary goal", "Secondary benefits"],
            "clientSummary": "Brief personalized summary for this client",
        },
        "weeks": [
            {
                "weekNumber": 1,
                "theme": copy.example_week_theme,
                "days": [
                    {
                        "day": 1,
                        "meals": [
                            {
                                "type": MEAL_SLOTS[0],
                                "name": copy.example_meal_name,
                                "ingredients": [
                                    {
                                        "item": "Food item",
                                        "quantity": "Amount",
                                        "calories": 100,
                                        "brand": "Optional brand",
                                    }
                                ],
                                "instructions": "Step by step cooking instructions",
                                "calories": 400,
                                "macros": {"protein": 25, "carbs": 45, "fats": 12},
                                "timing": "7:00",
                                "tips": ["Helpful tip for this meal"],
                            }
                        ],
                        "totalCalories": targets.total_calories,
                        "waterIntake": "3L",
                        "exercise": "Suggested activity",
                    }
                ],
            }
        ],
        "recommendations": {
            "supplements": ["Recommended supplements"],
            "tips": ["Daily lifestyle tips"],
            "warnings": ["Important considerations or warnings"],
        },
    }
    return json.dumps(example, indent=2, ensure_ascii=False)


def _render_profile(profile: ClientProfile, copy: _PromptCopy) -> str:
    values = {
        "name": profile.name,
        "age": profile.age,
        "sex": profile.sex.value,
        "height_cm": _format_number(profile.height_cm),
        "weight_kg": _format_number(profile.weight_kg),
        "goal": profile.goal.value,
        "activity_level": profile.activity_level.value,
        "restrictions": profile.restrictions,
        "allergies": profile.allergies,
        "medical_conditions": profile.medical_conditions,
        "current_diet": profile.current_diet,
        "water_intake": profile.water_intake,
        "sleep_hours": profile.sleep_hours,
        "stress_level": profile.stress_level,
        "budget": profile.budget,
        "cooking_time": profile.cooking_time,
    }
    return "\n".join(f"- {copy.labels[key]}: {value}" for key, value in values.items())


def _render_targets(targets: NutritionTargets, copy: _PromptCopy) -> str:
    labels = copy.target_labels
    lines = [
        f"- {labels['bmr']}: {targets.bmr} kcal",
        f"- {labels['total_calories']}: {targets.total_calories} kcal",
        f"- {labels['protein']}: {targets.protein_g}g ({targets.protein_kcal} kcal)",
        f"- {labels['carbs']}: {targets.carbs_g}g ({targets.carbs_kcal} kcal)",
        f"- {labels['fats']}: {targets.fats_g}g ({targets.fats_kcal} kcal)",
    ]
    return "\n".join(lines)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.1f}"
