# agents/fallback_agent.py

"""
LLM が使えない / 応答が壊れているときの決定的フォールバック。
各ステージの出力契約（型・非空性）を LLM と同じ形で満たす。
"""

from __future__ import annotations

import logging
from typing import Dict, List

from agents.recommender_agent import compute_priorities, sort_by_priority
from models.analysis_models import AnalysisResult, Issue, Strength
from models.recommendation_models import Recommendation
from models.score_models import ScoringResult

logger = logging.getLogger(__name__)

SEVERITY_TO_IMPACT = {"critical": "high", "major": "medium", "minor": "low"}
IMPACT_RANK = {"low": 1, "medium": 2, "high": 3}

# ============================================================
# Analyzer 用ルール
# ============================================================

STRENGTH_TEXTS = {
    "content": "Konten terstruktur dengan baik dan mudah dipahami",
    "layout": "Hierarki visual jelas dan membantu user memindai konten",
    "cta": "Call-to-action jelas dan mudah ditemukan",
    "accessibility": "Website memenuhi standar aksesibilitas dasar dengan baik",
}
GENERIC_STRENGTH = Strength(
    category="general",
    description="Beberapa aspek UX sudah cukup baik sebagai fondasi untuk perbaikan",
)

# ============================================================
# Recommender 用テンプレート（指摘カテゴリ → 提案）
# ============================================================

CATEGORY_RECOMMENDATIONS: Dict[str, Dict[str, str]] = {
    "content": {
        "title": "Perbaiki Struktur Konten",
        "description": (
            "Pastikan ada satu H1 yang jelas, meta description yang informatif (50-160 karakter), "
            "dan paragraf pendek yang mudah dipindai."
        ),
        "effort": "low",
    },
    "layout": {
        "title": "Tingkatkan Hierarki Visual",
        "description": (
            "Gunakan heading H1/H2/H3 secara berurutan, batasi jumlah CTA yang bersaing, "
            "dan beri white space yang cukup agar konten mudah dipindai."
        ),
        "effort": "medium",
    },
    "cta": {
        "title": "Optimalkan Call-to-Action",
        "description": (
            'Buat 1-3 tombol CTA yang menonjol dengan kata kerja yang spesifik (contoh: "Mulai Gratis", '
            '"Daftar Sekarang") dan tempatkan di posisi yang mudah dilihat.'
        ),
        "effort": "low",
    },
    "accessibility": {
        "title": "Perbaiki Aksesibilitas Dasar",
        "description": (
            "Pastikan kontras teks minimal 4.5:1, semua gambar informatif memiliki alt text, "
            "label form lengkap, dan ukuran font body minimal 16px."
        ),
        "effort": "medium",
    },
}
GENERIC_RECOMMENDATION = {
    "title": "Tinjau Ulang Pengalaman Pengguna",
    "description": "Tinjau alur utama halaman bersama tim dan perbaiki hambatan yang paling sering dialami pengguna.",
    "effort": "medium",
}
USER_TESTING_RECOMMENDATION = Recommendation(
    title="Lakukan User Testing",
    description=(
        "Meskipun tidak ada masalah kritis, selalu ada ruang untuk perbaikan. "
        "Lakukan user testing untuk mendapat feedback langsung."
    ),
    category="general",
    impact="medium",
    effort="medium",
    priority=0,
)


class FallbackSynthesizer:
    """
    デフォルトのフォールバック戦略。
    - analyze: フラグとスコア閾値（70/50/40）から指摘を作り、80 以上を強みにする
    - narrate: 合計スコア帯 + カテゴリ別コメント + 指摘件数
    - recommend: 指摘のカテゴリごとに固定の提案を 1 件
    """

    name = "default"

    # ------------------------------
    # Stage 1: Analyzer
    # ------------------------------
    def analyze(self, scoring: ScoringResult) -> AnalysisResult:
        flags, scores = scoring.flags, scoring.scores
        issues: List[Issue] = []

        def add(category: str, severity: str, description: str, evidence: str) -> None:
            issues.append(
                Issue(category=category, severity=severity, description=description, evidence=evidence)
            )

        # CONTENT
        if flags.no_h1 or scores.content < 70:
            if flags.no_h1:
                add("content", "critical",
                    "Halaman tidak memiliki heading utama (H1) yang jelas", "H1 count = 0")
            if flags.no_meta_description:
                add("content", "major",
                    "Meta description tidak ditemukan, penting untuk SEO", "Meta description missing")
            if flags.low_text_ratio:
                add("content", "minor",
                    "Rasio teks terhadap HTML terlalu rendah, halaman mungkin terlalu berat",
                    "Text ratio < 10%")
            if flags.placeholder_text_detected:
                add("content", "major",
                    "Terdeteksi teks placeholder (lorem ipsum), website belum production-ready",
                    "Placeholder text found")

        # LAYOUT
        if flags.multiple_h1 or scores.layout < 70:
            if flags.multiple_h1:
                add("layout", "major",
                    "Terdapat lebih dari satu H1, dapat membingungkan struktur halaman",
                    "Multiple H1 detected")
            if flags.too_many_ctas:
                add("layout", "minor",
                    "Terlalu banyak CTA yang bersaing, dapat membingungkan user", ">5 CTAs detected")
            if scores.layout < 50:
                add("layout", "major",
                    "Hierarki visual tidak jelas, sulit bagi user untuk memindai konten",
                    f"Layout score: {scores.layout}/100")

        # CTA
        if flags.no_primary_cta:
            add("cta", "critical", "Tidak ada call-to-action (CTA) utama yang jelas", "CTA count = 0")
        elif scores.cta < 50:
            add("cta", "major", "CTA tidak cukup jelas atau tidak mudah ditemukan",
                f"CTA score: {scores.cta}/100")

        # ACCESSIBILITY
        if flags.low_contrast:
            add("accessibility", "major",
                "Kontras warna teks kurang memenuhi standar aksesibilitas WCAG",
                "Color contrast below 4.5:1 ratio")
        if flags.missing_alt_text:
            add("accessibility", "major",
                "Sebagian besar gambar tidak memiliki teks alternatif (alt text)",
                ">50% images missing alt text")
        if flags.small_font:
            add("accessibility", "minor",
                "Ukuran font terlalu kecil, sulit dibaca terutama di mobile", "Body font size < 14px")

        # スコアが極端に低いカテゴリ
        if scores.content < 50:
            add("content", "critical", "Struktur konten sangat lemah, perlu perbaikan menyeluruh",
                f"Content score: {scores.content}/100")
        if scores.layout < 40:
            add("layout", "critical", "Layout dan hierarki perlu redesign untuk meningkatkan usability",
                f"Layout score: {scores.layout}/100")
        if scores.cta < 40:
            add("cta", "critical", "Tidak ada path yang jelas untuk user mencapai tujuan",
                f"CTA score: {scores.cta}/100")

        strengths = [
            Strength(category=category, description=text)
            for category, text in STRENGTH_TEXTS.items()
            if getattr(scores, category) >= 80
        ]
        if not strengths and max(scores.sub_scores()) >= 60:
            strengths.append(GENERIC_STRENGTH)

        logger.info("[fallback] analyze issues=%s strengths=%s", len(issues), len(strengths))
        return AnalysisResult(issues=issues, strengths=strengths)

    # ------------------------------
    # Stage 2: Storyteller
    # ------------------------------
    def narrate(self, scoring: ScoringResult, analysis: AnalysisResult) -> str:
        scores = scoring.scores
        total = scores.total

        if total >= 80:
            narrative = "🎉 Website Anda memiliki fondasi UX yang solid! "
        elif total >= 60:
            narrative = (
                "Website Anda memiliki beberapa aspek UX yang baik, namun ada beberapa area yang perlu "
                "diperbaiki untuk meningkatkan pengalaman pengguna. "
            )
        elif total >= 40:
            narrative = (
                "Website Anda memerlukan perbaikan UX yang cukup signifikan untuk meningkatkan "
                "kepuasan dan konversi pengguna. "
            )
        else:
            narrative = (
                "⚠️ Website Anda memerlukan perhatian serius pada aspek UX. Banyak area yang perlu "
                "diperbaiki untuk memberikan pengalaman yang baik kepada pengguna. "
            )

        narrative += f"\n\nSkor keseluruhan UX: {total}/100\n\n"

        notes: List[str] = []
        if scores.content < 70:
            extra = " secara menyeluruh" if scores.content < 50 else ""
            notes.append(f"📝 **Content ({scores.content}/100)**: Struktur konten perlu diperbaiki{extra}")
        if scores.layout < 70:
            extra = ", perlu redesign" if scores.layout < 50 else ""
            notes.append(f"🎨 **Layout ({scores.layout}/100)**: Hierarki visual kurang jelas{extra}")
        if scores.cta < 70:
            extra = ", user kesulitan mencapai tujuan" if scores.cta < 50 else ""
            notes.append(f"🎯 **CTA ({scores.cta}/100)**: Call-to-action tidak cukup efektif{extra}")
        if scores.accessibility < 70:
            notes.append(
                f"♿ **Accessibility ({scores.accessibility}/100)**: "
                "Standar aksesibilitas belum terpenuhi dengan baik"
            )
        if notes:
            narrative += "Area yang memerlukan perhatian:\n" + "\n".join(notes) + "\n\n"

        if analysis.issues:
            critical = analysis.count_by_severity("critical")
            major = analysis.count_by_severity("major")
            narrative += f"Kami menemukan **{len(analysis.issues)} masalah** yang perlu ditangani"
            if critical:
                narrative += f", termasuk **{critical} masalah kritis** yang sebaiknya segera diperbaiki"
            elif major:
                narrative += f", dengan **{major} masalah mayor** yang perlu perhatian"
            narrative += ". "

        narrative += (
            "\n\nDengan melakukan perbaikan yang kami rekomendasikan secara bertahap, website Anda dapat "
            "meningkatkan kepuasan pengguna dan mencapai tujuan bisnis dengan lebih efektif. "
        )
        if total >= 60:
            narrative += "Anda sudah memiliki fondasi yang cukup baik untuk dikembangkan lebih lanjut! 💪"
        else:
            narrative += "Mulai dari perbaikan yang paling kritis, lalu lanjutkan ke area lainnya. 🚀"

        return narrative

    # ------------------------------
    # Stage 3: Recommender
    # ------------------------------
    def recommend(self, scoring: ScoringResult, analysis: AnalysisResult) -> List[Recommendation]:
        by_title: Dict[str, Recommendation] = {}

        for issue in analysis.issues:
            template = CATEGORY_RECOMMENDATIONS.get(issue.category, GENERIC_RECOMMENDATION)
            impact = SEVERITY_TO_IMPACT[issue.severity]
            current = by_title.get(template["title"])

            # 同じ提案に複数の指摘が紐づく場合は、最も重い指摘の impact を採用
            if current is not None and IMPACT_RANK[current.impact] >= IMPACT_RANK[impact]:
                continue
            by_title[template["title"]] = Recommendation(
                title=template["title"],
                description=template["description"],
                category=issue.category if issue.category in CATEGORY_RECOMMENDATIONS else "general",
                impact=impact,
                effort=template["effort"],
            )

        recommendations = list(by_title.values()) or [USER_TESTING_RECOMMENDATION]
        result = sort_by_priority(compute_priorities(recommendations))
        logger.info("[fallback] recommend items=%s", len(result))
        return result


class DetailedFallbackSynthesizer(FallbackSynthesizer):
    """
    スコアと根拠データ（DetailSet）から直接提案を組み立てる旧来の規則セット。
    Analyzer / Storyteller はデフォルトと同じ。
    """

    name = "detailed"

    def recommend(self, scoring: ScoringResult, analysis: AnalysisResult) -> List[Recommendation]:
        scores, details = scoring.scores, scoring.details
        recs: List[Recommendation] = []
        categories = {i.category for i in analysis.issues}

        def add(title: str, description: str, category: str, impact: str, effort: str, priority: int) -> None:
            recs.append(Recommendation(
                title=title, description=description, category=category,
                impact=impact, effort=effort, priority=priority,
            ))

        if "content" in categories or scores.content < 70:
            if not details.content.has_h1:
                add("Tambahkan Heading Utama (H1)",
                    "Setiap halaman harus memiliki satu H1 yang jelas dan deskriptif yang menjelaskan "
                    "tujuan halaman kepada user dan search engine.",
                    "content", "high", "low", 2)
            if scores.content < 60:
                add("Perbaiki Struktur Konten",
                    "Gunakan heading hierarkis (H1, H2, H3) untuk mengorganisir konten. Pastikan meta "
                    "description ada dan informatif (50-160 karakter).",
                    "content", "high", "medium", 1)

        if "layout" in categories or scores.layout < 70:
            if details.layout.multiple_h1:
                add("Gunakan Hanya Satu H1",
                    "Hapus H1 duplikat dan gunakan H2/H3 untuk sub-heading. Ini membantu struktur "
                    "halaman lebih jelas.",
                    "layout", "medium", "low", 1)
            if scores.layout < 60:
                add("Tingkatkan Hierarki Visual",
                    "Gunakan ukuran font, warna, dan spacing yang berbeda untuk membuat hierarki visual "
                    "yang jelas. Prioritaskan konten penting di atas fold.",
                    "layout", "high", "medium", 1)

        if "cta" in categories or scores.cta < 70:
            if details.cta.primary_cta_count == 0:
                add("Tambahkan Call-to-Action Utama",
                    'Buat tombol CTA yang menonjol dengan teks aksi yang spesifik (contoh: "Mulai Gratis", '
                    '"Daftar Sekarang"). Tempatkan di posisi yang mudah dilihat.',
                    "cta", "high", "low", 2)
            if scores.cta < 60:
                add("Optimalkan CTA",
                    "Gunakan kata kerja yang jelas, buat tombol kontras dengan background, dan batasi "
                    "jumlah CTA per halaman (maksimal 2-3 CTA utama).",
                    "cta", "high", "low", 2)

        if "accessibility" in categories or scores.accessibility < 70:
            a11y = details.accessibility
            if a11y.low_contrast_count > 0:
                add("Perbaiki Kontras Warna",
                    "Pastikan rasio kontras antara teks dan background minimal 4.5:1 untuk teks normal "
                    "dan 3:1 untuk teks besar (sesuai WCAG AA).",
                    "accessibility", "high", "medium", 1)
            if a11y.missing_alt_percentage is not None and a11y.missing_alt_percentage > 50:
                add("Tambahkan Alt Text pada Gambar",
                    "Semua gambar informatif harus memiliki alt text yang menjelaskan konten gambar "
                    "untuk screen reader dan SEO.",
                    "accessibility", "medium", "low", 1)
            if a11y.body_font_size < 14:
                add("Tingkatkan Ukuran Font",
                    "Gunakan minimal 16px untuk body text agar mudah dibaca, terutama di perangkat mobile.",
                    "accessibility", "medium", "low", 1)

        if scores.content < 50 and not any(r.category == "content" for r in recs):
            add("Audit Konten Menyeluruh",
                "Lakukan review lengkap struktur konten: heading, paragraf, meta tags. Pastikan konten "
                "relevan dan mudah dipindai.",
                "content", "high", "high", 0)
        if scores.layout < 50 and not any(r.category == "layout" for r in recs):
            add("Redesign Layout",
                "Pertimbangkan redesign layout untuk meningkatkan usability: gunakan grid system, white "
                "space yang cukup, dan visual hierarchy yang jelas.",
                "layout", "high", "high", 0)

        if not recs:
            recs.append(USER_TESTING_RECOMMENDATION)

        return sort_by_priority(recs)


FALLBACK_STRATEGIES = {
    FallbackSynthesizer.name: FallbackSynthesizer,
    DetailedFallbackSynthesizer.name: DetailedFallbackSynthesizer,
}


def get_fallback_synthesizer(name: str = "default") -> FallbackSynthesizer:
    try:
        return FALLBACK_STRATEGIES[name]()
    except KeyError:
        logger.warning("[fallback] unknown strategy=%s, using default", name)
        return FallbackSynthesizer()
