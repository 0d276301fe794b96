"""
Configuration and constants for the dog yawning GLMM analysis.
"""

from pathlib import Path
from typing import Dict

# =============================================================================
# PATHS
# =============================================================================

PROJECT_DIR = Path(__file__).resolve().parent.parent

YAWN_DATA_CSV = PROJECT_DIR / "data" / "yawns.csv"
MODELS_DIR = PROJECT_DIR / "fitted_models"

# =============================================================================
# DATA COLUMNS AND LEVELS
# =============================================================================

ID_COL = "ID"
CONDITION_COL = "condition"
TRIAL_COL = "trial"
COUNT_COL = "numberYawns"
SECS_COL = "secs"
LOG_SECS_COL = "log_secs"

REQUIRED_COLUMNS = [ID_COL, CONDITION_COL, TRIAL_COL, COUNT_COL, SECS_COL]

# Raw level coded as 0; the single other level is coded as 1
CONDITION_REFERENCE_LABEL = "Anti-Social"
TRIAL_REFERENCE_VALUE = 1

# Display labels, indexed by the 0/1 code
CONDITION_LABELS = ["Anti-Social", "Pro-Social"]
TRIAL_LABELS = ["Trial 1", "Trial 2"]

# Reject a third categorical level instead of folding it into the "1" bucket
STRICT_LEVELS = True

SECONDS_PER_MINUTE = 60.0

# =============================================================================
# MODEL PRIORS
# =============================================================================

# Intercept of the log-rate per second: heavy tailed, centred on a low rate
PRIOR_INTERCEPT = ("student_t", 3.0, -4.0, 2.5)
PRIOR_SLOPE = ("normal", 0.0, 1.0)
# Secondary (zi / hu) intercept: logistic(0, 1) is flat on the probability scale
PRIOR_SECONDARY_INTERCEPT = ("logistic", 0.0, 1.0)
PRIOR_SECONDARY_SLOPE = ("normal", 0.0, 1.0)
PRIOR_RANDOM_SD = ("half_student_t", 3.0, 2.5)
PRIOR_SHAPE = ("gamma", 0.01, 0.01)
LKJ_ETA = 1.0

# =============================================================================
# SAMPLING CONFIGURATION
# =============================================================================

TEST = False  # Use synthetic data instead of the CSV

DRAWS = 2000
TUNE = 2000
CHAINS = 4
TARGET_ACCEPT = 0.95
HDI_PROB = 0.95
RANDOM_SEED = 1701

# Models with any coefficient above this R-hat are excluded from comparison
RHAT_MAX = 1.05

# =============================================================================
# REPORTING AND COMPARISON
# =============================================================================

ROUND_DIGITS = 2
Z_95 = 1.96

INFORMATION_CRITERION = "loo"
BASELINE_MODEL = "m1.1"

# =============================================================================
# VISUAL STYLING
# =============================================================================

CONDITION_COLORS: Dict[str, str] = {
    "Anti-Social": "#e06666",
    "Pro-Social": "#7986CB",
}

TRIAL_COLORS: Dict[str, str] = {
    "Trial 1": "#81C784",
    "Trial 2": "#FFB74D",
}

FAMILY_COLORS: Dict[str, str] = {
    "zero_inflated_poisson": "#c27ba0",
    "hurdle_poisson": "#7986CB",
    "poisson": "#81C784",
    "negbinomial": "#FFB74D",
    "zero_inflated_negbinomial": "#e06666",
}

# Matplotlib styling parameters
PLOT_STYLE = {
    "figure.dpi": 300,
    "font.size": 8,
    "axes.titlesize": 9,
    "axes.labelsize": 8,
    "xtick.labelsize": 6.5,
    "ytick.labelsize": 7,
    "axes.linewidth": 0.8,
    "axes.titleweight": "bold",
    "axes.titlepad": 8,
    "grid.alpha": 0.25,
    "grid.linestyle": "--",
    "grid.linewidth": 0.4,
    "pdf.fonttype": 42,
    "ps.fonttype": 42,
}

# Figures are written once per format
FIGURE_FORMATS = ("pdf", "png")

# =============================================================================
# OUTPUT PATHS
# =============================================================================

def get_output_paths(base_dir: Path = None):
    """Get output directory paths."""
    if base_dir is None:
        base_dir = PROJECT_DIR / "output"

    assets_dir = base_dir / "yawn_report_assets"
    report_path = base_dir / "yawn_report.html"

    return {
        "base_dir": base_dir,
        "assets_dir": assets_dir,
        "report_path": report_path,
    }
