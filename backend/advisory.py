"""
FarmerAid - Crop care advisory.
Rule-based risk level, threats and recommendations per crop, plus the three
crop-care sections (fertilizer, watering, pest & disease). All numbers come from
the shared ForecastAggregate, so the advisory cannot disagree with the
suitability check about the forecast.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional

from context import AssessmentContext
from forecast import ForecastAggregate, daily_outlook, hourly_summary, weather_condition

RISK_LOW = "Low"
RISK_MODERATE = "Moderate"
RISK_HIGH = "High"

FERT = {
    "N": "Urea (Nitrogen)",
    "P": "DAP / SSP (Phosphorus)",
    "K": "MOP (Potassium)",
    "Zn": "Zinc Sulfate",
}

STANDARD_RECOMMENDATIONS = [
    "Regularly scout your fields (at least twice a week) for early detection of any symptoms or pest presence.",
    "Ensure proper field sanitation by removing weeds and crop residues, which can act as hosts.",
    "Consult your local agricultural extension officer for specific, localized advice tailored to your farm.",
]

DISCLAIMER = (
    "This advisory is based on current weather forecasts and generalized agricultural models. "
    "Always cross-reference with actual field observations and local expert guidance."
)


@dataclass
class RiskAssessment:
    level: str = RISK_LOW
    summary: str = ""
    threats: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def raise_to(self, level: str):
        """High always wins; Moderate only lifts a Low."""
        if level == RISK_HIGH or self.level == RISK_LOW:
            self.level = level

    def add(self, level: str, threat: str, recommendation: str):
        self.threats.append(threat)
        self.recommendations.append(recommendation)
        self.raise_to(level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "summary": self.summary,
            "threats": list(self.threats),
            "recommendations": list(self.recommendations) + STANDARD_RECOMMENDATIONS,
            "disclaimer": DISCLAIMER,
        }


@dataclass
class CareSection:
    title: str
    items: List[str]
    summary: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "summary": self.summary, "items": list(self.items), "note": self.note}


@dataclass
class Advisory:
    crop: str
    location: str
    risk: RiskAssessment
    fertilizer: CareSection
    watering: CareSection
    pest: CareSection

    def to_dict(self) -> Dict[str, Any]:
        return {
            "crop": self.crop,
            "location": self.location,
            "risk": self.risk.to_dict(),
            "fertilizer": self.fertilizer.to_dict(),
            "watering": self.watering.to_dict(),
            "pest": self.pest.to_dict(),
        }


def _above(value: Optional[float], limit: float) -> bool:
    return value is not None and value > limit


def _below(value: Optional[float], limit: float) -> bool:
    return value is not None and value < limit


# --- Risk rules ---

def _wheat_rules(agg: ForecastAggregate, risk: RiskAssessment):
    if agg.avg_max_temp > 25 and agg.total_rain_5d > 10 and _above(agg.avg_humidity, 70):
        risk.add(RISK_HIGH,
                 "High risk of Wheat Rust (Puccinia spp.) due to warm, humid, and rainy conditions.",
                 "Monitor for rust symptoms (orange/brown pustules). Consider preventative fungicide "
                 "application if previous history of rust in your area.")
    elif agg.avg_max_temp > 20 and _above(agg.avg_humidity, 60) and agg.total_rain_5d > 0:
        risk.add(RISK_MODERATE,
                 "Moderate risk of powdery mildew or general fungal infections.",
                 "Ensure good air circulation, avoid excessive nitrogen, and scout fields regularly.")
    elif agg.avg_min_temp < 5 and agg.total_rain_5d == 0:
        risk.add(RISK_MODERATE,
                 "Potential for cold stress, affecting early growth. Low risk of frost if temperatures dip below 0°C.",
                 "Monitor minimum temperatures closely. Ensure adequate soil moisture to buffer against "
                 "temperature changes.")


def _rice_rules(agg: ForecastAggregate, risk: RiskAssessment):
    if agg.avg_max_temp > 30 and agg.total_rain_5d > 20 and _above(agg.avg_humidity, 85):
        risk.add(RISK_HIGH,
                 "High risk of Bacterial Blight and Rice Blast. Favorable for rapid spread.",
                 "Ensure proper drainage, avoid broad-spectrum insecticides (can flare blight), and use "
                 "resistant varieties.")
    elif agg.avg_min_temp > 20 and _above(agg.avg_humidity, 80) and agg.total_rain_5d > 5:
        risk.add(RISK_MODERATE,
                 "Moderate risk of fungal diseases like sheath blight and blast.",
                 "Maintain optimal water levels, avoid very dense planting, and scout for early symptoms.")
    elif agg.avg_min_temp < 18 and agg.total_rain_5d > 10:
        risk.add(RISK_MODERATE,
                 "Risk of cold-related stress or reduced growth, especially if combined with wet conditions.",
                 "Ensure good water management to prevent prolonged cold water stress. Consider drainage "
                 "during cold spells.")


def _sugarcane_rules(agg: ForecastAggregate, risk: RiskAssessment):
    if agg.avg_max_temp > 32 and _above(agg.avg_humidity, 75):
        risk.add(RISK_HIGH,
                 "High risk of Red Rot and Top Borer activity due to hot and humid conditions.",
                 "Inspect stalks for lesions/borer holes. Roguing infected plants is crucial. Maintain field hygiene.")
    elif agg.avg_max_temp > 28 and _above(agg.avg_humidity, 60):
        risk.add(RISK_MODERATE,
                 "Moderate risk of general pest activity like mealybugs and early Red Rot symptoms.",
                 "Regular scouting, especially on leaf sheaths. Ensure balanced fertilization for strong plant health.")
    elif agg.avg_min_temp < 15 and agg.total_rain_5d > 0:
        risk.add(RISK_MODERATE,
                 "Slower growth and potential for ratoon stunting disease to become more prominent under "
                 "cooler, wet conditions.",
                 "Avoid waterlogging. Ensure proper drainage to prevent fungal issues associated with cooler soil.")


def _cotton_rules(agg: ForecastAggregate, risk: RiskAssessment):
    # hot and dry favours whiteflies
    if (agg.avg_max_temp > 35 and agg.avg_min_temp > 25
            and _below(agg.avg_humidity, 60) and agg.total_rain_5d < 5):
        risk.add(RISK_HIGH,
                 "High risk of Whitefly infestation and associated Cotton Leaf Curl Virus (CLCuV).",
                 "Intensify whitefly monitoring. Consider yellow sticky traps. Use recommended insecticides "
                 "judiciously and only if threshold is met.")
    elif agg.avg_max_temp > 30 and _above(agg.avg_humidity, 70) and agg.total_rain_5d > 15:
        risk.add(RISK_MODERATE,
                 "Moderate risk of Bacterial Blight and boll rot if weather persists.",
                 "Ensure good drainage. Avoid waterlogging. Use copper-based fungicides if blight is detected.")
    elif agg.avg_min_temp < 18:
        risk.add(RISK_MODERATE,
                 "Cooler night temperatures might slow boll development or contribute to square/boll shedding.",
                 "Maintain optimal nutrient balance to support plant growth during cooler periods. "
                 "Ensure adequate soil moisture.")


def _maize_rules(agg: ForecastAggregate, risk: RiskAssessment):
    if agg.avg_max_temp > 30 and _above(agg.avg_humidity, 70) and agg.total_rain_5d > 10:
        risk.add(RISK_HIGH,
                 "High risk of Southern Corn Leaf Blight and Maize Stem Borer. Favorable for fungal growth "
                 "and insect activity.",
                 "Scout for leaf lesions and stem damage. Consider appropriate fungicides/insecticides if "
                 "symptoms or pest counts are high.")
    elif agg.avg_max_temp > 25 and _above(agg.avg_humidity, 60):
        risk.add(RISK_MODERATE,
                 "Moderate risk of general fungal diseases and armyworms.",
                 "Maintain good field sanitation. Monitor for early signs of disease or insect damage.")
    elif agg.avg_min_temp < 10:
        risk.add(RISK_MODERATE,
                 "Cool soil temperatures can hinder early seedling emergence and establishment. Risk of chilling injury.",
                 "Delay planting until soil temperatures are consistently above 10-12°C. Ensure good seedbed preparation.")


def _generic_rules(agg: ForecastAggregate, risk: RiskAssessment):
    if agg.total_rain_5d > 25 and _above(agg.avg_humidity, 80) and agg.avg_max_temp > 25:
        risk.add(RISK_HIGH,
                 "High risk of general fungal diseases (e.g., blights, mildews) and root rot due to very wet "
                 "and warm conditions.",
                 "Improve drainage. Avoid over-irrigation. Apply preventative fungicides if applicable.")
    elif agg.total_rain_5d > 10 and _above(agg.avg_humidity, 70):
        risk.add(RISK_MODERATE,
                 "Moderate risk of fungal diseases and increased pest activity.",
                 "Increase field monitoring. Ensure good plant spacing for air circulation.")
    elif agg.avg_max_temp > 35 and agg.total_rain_5d < 5:
        risk.add(RISK_MODERATE,
                 "Risk of heat stress and increased water demand. Potential for spider mites in dry conditions.",
                 "Ensure adequate irrigation. Provide shade if possible for sensitive crops. Monitor for mites.")


CROP_RULES = {
    "wheat": _wheat_rules,
    "rice": _rice_rules,
    "sugarcane": _sugarcane_rules,
    "cotton": _cotton_rules,
    "maize": _maize_rules,
}


def assess_risk(aggregate: ForecastAggregate, crop: str) -> RiskAssessment:
    """Risk level, threats and recommendations from the per-crop rule table."""
    risk = RiskAssessment()
    rules = CROP_RULES.get((crop or "").strip().lower(), _generic_rules)
    rules(aggregate, risk)

    trend = (
        f"The next {aggregate.days} days show average temperatures between {aggregate.avg_min_temp:.1f}°C "
        f"and {aggregate.avg_max_temp:.1f}°C, with total rainfall of {aggregate.total_rain_5d:.1f}mm."
    )
    if aggregate.avg_humidity is not None:
        trend += f" Average relative humidity is around {aggregate.avg_humidity:.1f}%."

    if not risk.threats:
        risk.threats.append("No significant pest or disease activity is currently indicated by the weather forecast.")
        risk.recommendations.append("Continue routine crop management, field monitoring, and good agricultural practices.")
        risk.summary = f"The weather for the next {aggregate.days} days appears largely favorable for your {crop} crop. {trend}"
    else:
        risk.summary = f"The weather for the next {aggregate.days} days presents some challenges for your {crop} crop. {trend}"
    return risk


# --- Crop care sections ---

def fertilizer_guidance(aggregate: ForecastAggregate, crop: str) -> CareSection:
    hot_dry = aggregate.avg_max_temp > 28 and aggregate.avg_daily_rain < 5
    wet = aggregate.avg_daily_rain > 20
    cool = aggregate.avg_max_temp < 18

    items = []
    c = (crop or "").strip().lower()
    if c == "sugarcane":
        items.append(f"{FERT['N']}: split application, basal + top dress during grand growth.")
        items.append(f"{FERT['P']}: at planting/transplanting for roots.")
        items.append(f"{FERT['K']}: ensure K for stalk strength.")
        if wet:
            items.append("High rainfall risk: prefer split N or foliar micro-nutrient top-ups after rain.")
        if hot_dry:
            items.append("Hot/dry: maintain soil moisture pre-application to improve uptake.")
    elif c == "wheat":
        items.append(f"{FERT['N']}: basal at sowing + top-dressing at tillering/jointing.")
        items.append(f"{FERT['P']}: at sowing if soil P is low.")
        items.append(f"{FERT['Zn']}: consider if soil tests indicate zinc deficiency.")
        if wet:
            items.append("Delay heavy N applications until soil is workable post-rain.")
        if cool:
            items.append("Cool soils: prefer smaller split N doses.")
    elif c == "rice":
        items.append(f"{FERT['N']}: time around tillering and panicle initiation; avoid large N before heavy rain.")
        items.append(f"{FERT['P']}: early application for establishment.")
        if wet:
            items.append("Heavy rain: consider a small N top-up after rains clear to recover lost N.")
    elif c == "cotton":
        items.append(f"{FERT['N']}: split doses; avoid excessive N close to boll opening.")
        items.append(f"{FERT['P']} & {FERT['K']}: ensure adequate P and K early in the season.")
        if hot_dry:
            items.append("Hot/dry forecast: ensure irrigation when applying N to promote uptake.")
    elif c == "maize":
        items.append(f"{FERT['N']}: large N demand; split planting + sidedress.")
        items.append(f"{FERT['P']}: at planting for early vigor.")
        items.append(f"{FERT['K']}: important for grain fill.")
        if wet:
            items.append("High rainfall risk: consider split N or slow-release formulations if available.")
    else:
        items.append("Balanced N-P-K program; prefer split N applications to reduce leaching.")
        if wet:
            items.append("Avoid applying large quantities right before heavy rains.")

    soil = f"{aggregate.avg_soil_temp:.1f}°C" if aggregate.avg_soil_temp is not None else "n/a"
    summary = (
        f"Avg Tmax {aggregate.avg_max_temp:.1f}°C, Avg daily rain {aggregate.avg_daily_rain:.1f} mm, "
        f"Soil temp: {soil}."
    )
    return CareSection(
        title=f"Fertilizer recommendations for {crop}",
        summary=summary,
        items=items,
        note="These are general recommendations. Use soil tests for exact rates and local extension advice.",
    )


def watering_schedule(aggregate: ForecastAggregate, crop: str) -> CareSection:
    et0 = aggregate.avg_et0 or 0.0
    days = aggregate.days
    et0_text = f"{et0:.1f}" if aggregate.avg_et0 else "n/a"

    items = [
        f"Estimated ET0: {et0_text} mm/day over the next {days} days.",
        f"Total forecast rainfall: {aggregate.total_rain_5d:.1f} mm over {days} days.",
    ]
    if aggregate.total_rain_5d > et0 * days * 0.7:
        items.append("Reduced irrigation needed: rainfall likely meets much of crop water need.")
        items.append("Monitor soil moisture; resume irrigation when soil begins to dry.")
    elif aggregate.total_rain_5d < et0 * days * 0.3 and aggregate.avg_max_temp > 28:
        items.append("Increased irrigation likely required: high evaporative demand with low rainfall.")
        items.append("Irrigate early morning or late evening; consider efficient systems (drip) where possible.")
    else:
        items.append("Regular irrigation recommended based on crop stage and soil moisture checks.")

    c = (crop or "").strip().lower()
    if c == "rice":
        items.append("Maintain appropriate standing water depth for rice paddies based on crop stage.")
    elif c == "cotton":
        items.append("Cotton: avoid water stress during flowering and boll formation.")
    elif c == "wheat":
        items.append("Wheat: ensure moisture during crown root initiation and flowering stages.")

    return CareSection(
        title="Watering schedule",
        items=items,
        note="Adjust irrigation using field checks and local guidance.",
    )


def pest_guidance(aggregate: ForecastAggregate, risk_level: str) -> CareSection:
    items = []
    if risk_level == RISK_HIGH:
        items.append("High Alert: Intensify scouting and be prepared for targeted control measures.")
        items.append("Focus surveillance on known vulnerable crop parts and low-lying wet areas.")
    elif risk_level == RISK_MODERATE:
        items.append("Moderate Alert: Increase monitoring frequency and prepare intervention plans.")
    else:
        items.append("Low Risk: Continue routine monitoring and cultural practices.")

    if aggregate.avg_daily_rain > 10 and aggregate.avg_max_temp > 25:
        items.append("Warm, humid conditions elevate fungal disease risk; improve air circulation and avoid dense canopies.")
    if aggregate.avg_max_temp > 30 and aggregate.avg_daily_rain < 5:
        items.append("Hot, dry spells can favor insect pests (e.g., whiteflies, mites). Monitor leaf undersides.")

    items.append("Integrated Pest Management (IPM): combine cultural, biological, and chemical controls as needed.")
    return CareSection(
        title="Pest & Disease guidance",
        items=items,
        note="Combine these with local expert advice and field observations.",
    )


def generate_advisory(context: AssessmentContext) -> Advisory:
    """Risk assessment plus the three crop-care sections for one context."""
    aggregate = context.aggregate
    risk = assess_risk(aggregate, context.crop)
    return Advisory(
        crop=context.crop,
        location=context.location_label,
        risk=risk,
        fertilizer=fertilizer_guidance(aggregate, context.crop),
        watering=watering_schedule(aggregate, context.crop),
        pest=pest_guidance(aggregate, risk.level),
    )


def build_advisory_prompt(context: AssessmentContext, today: Optional[date] = None) -> str:
    """Prompt for the generative endpoint: current weather, daily outlook, 48 h summary, requested format."""
    today = today or date.today()
    crop = context.crop
    lines = [
        f"You are an AI agricultural expert providing advice to a farmer in {context.location_label} "
        f"for their {crop} crop.",
        "Based on the following 5-day weather forecast, provide a concise, actionable advisory on potential "
        "crop risks (pests, diseases, environmental stress) and general protective measures.",
        f"Assume the current date is {today.isoformat()}.",
        "",
    ]

    current = context.forecast.get("current_weather") or {}
    if current:
        lines.append("Current Weather:")
        lines.append(
            f"Temperature: {current.get('temperature')}°C, "
            f"Condition: {weather_condition(current.get('weathercode'))}, "
            f"Wind: {current.get('windspeed')} m/s"
        )
        lines.append("")

    lines.append("5-Day Daily Forecast:")
    for row in daily_outlook(context.forecast):
        humidity = ""
        if row["humidity_min"] is not None and row["humidity_max"] is not None:
            humidity = f"Humidity {row['humidity_min']}%-{row['humidity_max']}%, "
        lines.append(
            f"  {row['date']}: Max Temp {row['max_temp']}°C, Min Temp {row['min_temp']}°C, "
            f"{humidity}Rain {row['rain']:.1f}mm, Condition: {row['condition']}."
        )

    hourly = hourly_summary(context.forecast)
    if hourly:
        lines.append("")
        lines.append("Hourly Forecast Summary (next 48 hours):")
        for row in hourly:
            lines.append(f"  {row['time']}: Temp {row['temp']}°C, Hum {row['humidity']}%, Rain {row['rain']:.1f}mm.")

    lines.extend([
        "",
        f"Based on this, identify the overall risk level (Low, Moderate, High) for pests, diseases, or "
        f"environmental stress for the {crop} crop.",
        "Then, provide:",
        "1. A brief summary of the weather trend.",
        "2. Specific potential threats (pests/diseases) with conditions favoring them.",
        "3. Actionable preventative recommendations.",
        "4. Include a general disclaimer about local conditions.",
        "Format the output clearly with headings and bullet points.",
    ])
    return "\n".join(lines)
