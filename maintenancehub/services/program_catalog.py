"""
Path to Excellence program catalog.

Static definition of the seven program phases (phase 0 is the initial
process assessment, phases 1–6 are implementation phases), their checklists,
the forms attached to checklist items, and the default 23-element
Maintenance Process Assessment scorecard (100 points).

The catalog is code, not data: it changes with releases, and stored
progress records reference checklist items only by id.

Usage:
    from maintenancehub.services.program_catalog import get_checklist, default_assessment_items

    checklist = get_checklist(3)          # tuple[ChecklistItem, ...]
    items = default_assessment_items()    # list[AssessmentItem], all scored 0
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from maintenancehub.core.exceptions import ValidationError
from maintenancehub.services.assessment_model import AssessmentItem

ASSESSMENT_PHASE = 0
FIRST_PHASE = 1
LAST_PHASE = 6
IMPLEMENTATION_PHASES = tuple(range(FIRST_PHASE, LAST_PHASE + 1))
ALL_PHASES = (ASSESSMENT_PHASE,) + IMPLEMENTATION_PHASES

PROCESS_ASSESSMENT = "process_assessment"
ASSESSMENT_CHECKLIST_ITEM = "0-1"


class FormType(str, Enum):
    """Interactive form attached to a checklist item."""
    PROCESS_ASSESSMENT = PROCESS_ASSESSMENT
    EQUIPMENT_INVENTORY = "equipment_inventory"
    CRITICALITY_MATRIX = "criticality_matrix"
    FMEA_ANALYSIS = "fmea_analysis"
    RAIL_TRACKER = "rail_tracker"
    ROADMAP_INIT = "roadmap_init"
    BDA_ANALYSIS = "bda_analysis"
    PARTS_ABC_ANALYSIS = "parts_abc_analysis"
    SCORECARD = "scorecard"
    CHANGE_AGENT = "change_agent"
    LEADERSHIP_INTERVIEW = "leadership_interview"
    LEADERSHIP_OBSERVATION = "leadership_observation"


CHECKLIST_FORMS: dict[str, FormType] = {
    "0-1": FormType.PROCESS_ASSESSMENT,
    # Phase 1: Equipment Criticality Assessment
    "1-1": FormType.EQUIPMENT_INVENTORY,
    "1-3": FormType.EQUIPMENT_INVENTORY,
    "1-6": FormType.CRITICALITY_MATRIX,
    "1-7": FormType.CRITICALITY_MATRIX,
    "1-8": FormType.CRITICALITY_MATRIX,
    "1-9": FormType.CRITICALITY_MATRIX,
    "1-10": FormType.CRITICALITY_MATRIX,
    "1-12": FormType.FMEA_ANALYSIS,
    "1-14": FormType.RAIL_TRACKER,
    "1-15": FormType.ROADMAP_INIT,
    # Phase 2: Root Cause Analysis System
    "2-2": FormType.BDA_ANALYSIS,
    "2-3": FormType.BDA_ANALYSIS,
    "2-10": FormType.BDA_ANALYSIS,
    "2-15": FormType.RAIL_TRACKER,
    # Phase 3: Storeroom MRO Optimization
    "3-8": FormType.PARTS_ABC_ANALYSIS,
    "3-9": FormType.PARTS_ABC_ANALYSIS,
    "3-10": FormType.PARTS_ABC_ANALYSIS,
    "3-11": FormType.PARTS_ABC_ANALYSIS,
    "3-12": FormType.PARTS_ABC_ANALYSIS,
    "3-13": FormType.PARTS_ABC_ANALYSIS,
    "3-15": FormType.RAIL_TRACKER,
    # Phase 4: Preventive Maintenance Excellence
    "4-15": FormType.RAIL_TRACKER,
    # Phase 5: Data-Driven Performance Management
    "5-3": FormType.SCORECARD,
    "5-4": FormType.SCORECARD,
    "5-5": FormType.SCORECARD,
    "5-15": FormType.RAIL_TRACKER,
    # Phase 6: Continuous Improvement & Sustainability
    "6-1": FormType.CHANGE_AGENT,
    "6-2": FormType.LEADERSHIP_INTERVIEW,
    "6-3": FormType.LEADERSHIP_OBSERVATION,
    "6-15": FormType.RAIL_TRACKER,
}


# ═════════════════════════════════════════════════════════════════════════════
# Data classes
# ═════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ChecklistItem:
    id: str
    text: str
    deliverable: str
    form_type: FormType | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "text": self.text,
            "deliverable": self.deliverable,
            "form_type": self.form_type.value if self.form_type else None,
        }


@dataclass(frozen=True)
class ProgramPhase:
    number: int
    title: str
    description: str
    objective: str
    timeline: str
    key_deliverables: tuple[str, ...]
    checklist: tuple[ChecklistItem, ...]

    def to_dict(self, include_checklist: bool = True) -> dict:
        data = {
            "number": self.number,
            "title": self.title,
            "description": self.description,
            "objective": self.objective,
            "timeline": self.timeline,
            "key_deliverables": list(self.key_deliverables),
            "checklist_count": len(self.checklist),
        }
        if include_checklist:
            data["checklist"] = [item.to_dict() for item in self.checklist]
        return data


def _item(item_id: str, text: str, deliverable: str) -> ChecklistItem:
    return ChecklistItem(item_id, text, deliverable, CHECKLIST_FORMS.get(item_id))


# ═════════════════════════════════════════════════════════════════════════════
# Checklists (ids are "<phase>-<n>")
# ═════════════════════════════════════════════════════════════════════════════

_CHECKLIST_ITEMS: tuple[ChecklistItem, ...] = (
    _item("0-1", "Complete the Maintenance Process Assessment Scorecard with cross-functional team",
          "Scored assessment with all 23 elements rated, comments documented, and custom improvement checklist generated"),
    _item("1-1", "Collect existing equipment lists from all departments",
          "Equipment lists from operations, EHS, engineering, and finance consolidated"),
    _item("1-2", "Verify equipment nameplate data in field (walk-through)",
          "Physical verification of 100% equipment with photos and nameplate details"),
    _item("1-3", "Build hierarchical equipment registry (Site→Area→Line→Equipment→Component)",
          "Master equipment list with 5-level hierarchy structure in Excel/CMMS"),
    _item("1-4", "Assign unique asset ID tags to all equipment",
          "Sequential asset ID numbering scheme with labels applied to equipment"),
    _item("1-5", "Document equipment specifications (make, model, year, capacity, criticality notes)",
          "Complete equipment database with technical specifications"),
    _item("1-6", "Define criticality scoring matrix with cross-functional team",
          "5x5 matrix across 6 criteria: Safety, Environment, Production Impact, Quality, MTTR, Cost"),
    _item("1-7", "Conduct scoring workshops with operations, maintenance, and engineering",
          "Workshop attendance records with consensus scores for each criterion"),
    _item("1-8", "Score all equipment using defined matrix (Safety 1-5, Environment 1-5, etc.)",
          "Criticality scores calculated for 100% of equipment with total weighted scores"),
    _item("1-9", "Calculate composite criticality scores (weighted average across 6 criteria)",
          "Single criticality score per asset (0-100 scale)"),
    _item("1-10", "Apply ABC classification using Pareto principle",
          "A-Critical (10-15%), B-Important (20-30%), C-Non-critical (55-70%) distribution"),
    _item("1-11", "Validate A-critical equipment with plant manager approval",
          "Sign-off from operations confirming critical asset list accuracy"),
    _item("1-12", "Conduct detailed FMEA on top 10 critical assets",
          "FMEA worksheets with failure modes, effects, and RPN scores >100"),
    _item("1-13", "Extract 12-month historical failure data from CMMS/maintenance logs",
          "Failure records for all A+B equipment with root cause coding"),
    _item("1-14", "Calculate baseline MTBF for each A-critical asset",
          "Mean Time Between Failure calculated from historical downtime data"),
    _item("1-15", "Calculate baseline MTTR for each A-critical asset",
          "Mean Time To Repair averaged from work order completion times"),
    _item("1-16", "Calculate Overall Equipment Effectiveness (OEE) baseline",
          "OEE = Availability x Performance x Quality for critical production lines"),
    _item("1-17", "Build risk matrix visualization (5x5 heat map)",
          "Heat map with equipment plotted by consequence (Y-axis) and frequency (X-axis)"),
    _item("1-18", "Create KPI dashboard showing criticality distribution and baseline metrics",
          "Visual dashboard: ABC pie chart, MTBF/MTTR trends, top 10 bad actors"),
    _item("1-19", "Prepare executive presentation deck with findings and recommendations",
          "20-slide PowerPoint: current state, criticality results, gaps, action plan"),
    _item("1-20", "Present to leadership and obtain approval to proceed to next phase",
          "Signed approval to implement RCA system and optimize maintenance resources"),
    _item("2-1", "Research best-practice RCA methodologies (5 Whys, Fishbone, FMEA, Apollo, TapRooT)",
          "Comparison matrix of methodologies with pros/cons for your industry"),
    _item("2-2", "Select primary and secondary RCA methods for organization",
          "Decision document selecting 5 Whys (simple) and Fishbone (complex)"),
    _item("2-3", "Design 8-hour RCA training curriculum",
          "Training agenda, PowerPoint slides, workbooks, and 3 case study exercises"),
    _item("2-4", "Develop RCA policy document with mandatory triggers",
          "2-page policy: When to RCA (safety incident, >4hr downtime, repeat failure, $10K+ cost)"),
    _item("2-5", "Create RCA facilitator guide and templates",
          "Facilitator handbook with meeting scripts, templates, and facilitation tips"),
    _item("2-6", "Schedule and deliver training to all maintenance technicians (Day shift)",
          "8-hour training session with 100% attendance and sign-in sheets"),
    _item("2-7", "Schedule and deliver training to all maintenance technicians (Night shift)",
          "8-hour training session with 100% attendance and sign-in sheets"),
    _item("2-8", "Schedule and deliver training to operations supervisors and engineers",
          "4-hour condensed training for cross-functional team participation"),
    _item("2-9", "Administer post-training assessment quiz (target 80%+ pass rate)",
          "Quiz results showing competency in 5 Whys and Fishbone techniques"),
    _item("2-10", "Implement RCA Oracle digital system in MaintenanceHub",
          "RCA module configured with AI assistant and structured forms"),
    _item("2-11", "Integrate RCA Oracle with work order and equipment databases",
          "System linkages allowing RCAs to reference equipment and failure history"),
    _item("2-12", "Complete first practice RCA on recent unplanned downtime event",
          "Documented RCA with 5 Whys, root causes, and 3+ corrective actions"),
    _item("2-13", "Complete second practice RCA on quality defect or safety near-miss",
          "Fishbone diagram with 6M categories and verified root causes"),
    _item("2-14", "Complete third practice RCA on chronic repeat failure",
          "RCA showing pattern of failures and systemic root cause identified"),
    _item("2-15", "Complete fourth and fifth practice RCAs on additional events",
          "Two more RCAs practicing methodology and building team capability"),
    _item("2-16", "Establish weekly RCA review meeting (standing Friday 10am)",
          "Calendar invites sent, agenda template created, meeting minutes format"),
    _item("2-17", "Conduct first RCA review meeting with leadership attendance",
          "Meeting minutes showing 5 RCAs reviewed with action item assignments"),
    _item("2-18", "Build 3-tier RCA certification program",
          "Level 1 (Participant), Level 2 (Facilitator), Level 3 (Master) with requirements"),
    _item("2-19", "Certify 5+ staff to Level 2 (RCA Facilitator) status",
          "Certification records for facilitators qualified to lead RCA sessions"),
    _item("2-20", "Create RCA effectiveness scorecard",
          "Monthly metrics: # RCAs completed, avg time to close actions, % repeat failures"),
    _item("2-21", "Track repeat failure rate trending downward",
          "Dashboard showing repeat failure rate decreasing month-over-month"),
    _item("2-22", "Document 3 success stories with quantified savings",
          "Case studies: Problem, RCA findings, actions taken, $ savings realized"),
    _item("3-1", "Freeze storeroom activity for 2-day physical inventory count",
          "Communication plan and schedule for complete inventory shutdown"),
    _item("3-2", "Assemble cross-functional count team (ops, maintenance, finance)",
          "Team of 6-8 people assigned with roles and bin assignments"),
    _item("3-3", "Conduct physical count of all storeroom items with dual verification",
          "Count sheets completed with two independent counters per bin"),
    _item("3-4", "Enter count data into spreadsheet and reconcile to system records",
          "Variance report showing discrepancies >10% or >$1,000 value"),
    _item("3-5", "Investigate and resolve major variances (recount, adjust records)",
          "Reconciled inventory with <2% variance and documented adjustments"),
    _item("3-6", "Calculate total storeroom inventory valuation",
          "Total dollar value of inventory by category (rotating, insurance, consumables)"),
    _item("3-7", "Extract 12-month usage data from work orders and issue transactions",
          "Parts consumption history showing quantity and dollar value per SKU"),
    _item("3-8", "Perform ABC analysis using annual consumption value (Pareto 80/20)",
          "A-items (80% of spend), B-items (15% of spend), C-items (5% of spend)"),
    _item("3-9", "Calculate Economic Order Quantity (EOQ) for all A and B items",
          "EOQ formula results minimizing ordering + carrying costs per SKU"),
    _item("3-10", "Determine lead times from suppliers for all A and B items",
          "Supplier lead time data (avg days from PO to receipt) per part"),
    _item("3-11", "Calculate safety stock levels based on lead time and usage variability",
          "Safety stock quantities protecting against stockouts during lead time"),
    _item("3-12", "Set reorder points (Min = Lead Time Demand + Safety Stock)",
          "Min levels triggering replenishment for all stocked items"),
    _item("3-13", "Set maximum stock levels (Max = Reorder Point + EOQ)",
          "Max levels preventing overstock and excess carrying costs"),
    _item("3-14", "Identify and phase out obsolete/slow-moving parts (>24 months no usage)",
          "Obsolescence list with disposal plan and expected recovery value"),
    _item("3-15", "Build Bill of Materials (BoM) for all A-critical equipment",
          "BoM showing critical spare parts required for each A-critical asset"),
    _item("3-16", "Identify long-lead or sole-source critical spares requiring insurance stock",
          "Insurance stock list with justification and carrying cost analysis"),
    _item("3-17", "Redesign storeroom layout using 5S principles (Sort, Set, Shine, Standardize, Sustain)",
          "Layout drawing with fast-movers near issue window, FIFO flow, ergonomic placement"),
    _item("3-18", "Implement visual controls (bin labels, floor markings, shadow boards)",
          "Photos showing labeled bins, color-coded zones, and tool shadow boards"),
    _item("3-19", "Install barcode labels on all bins and issue barcode scanners",
          "Barcode system integrated with MaintenanceHub parts inventory module"),
    _item("3-20", "Train storeroom staff on new system and procedures",
          "Training records for all staff on ABC, Min/Max, barcode scanning, cycle counting"),
    _item("3-21", "Establish cycle counting program (A-monthly, B-quarterly, C-annually)",
          "Cycle count calendar with daily count assignments and accuracy targets"),
    _item("3-22", "Create storeroom performance dashboard",
          "KPI dashboard: inventory accuracy %, turnover ratio, stockout rate, carrying cost"),
    _item("4-1", "Extract all current PMs from CMMS (schedule, frequency, tasks, labor hours)",
          "Complete PM list with current frequencies and estimated annual labor burden"),
    _item("4-2", "Audit PM effectiveness using 12-month failure history",
          "Analysis showing which PMs prevented failures vs. which are ineffective"),
    _item("4-3", "Identify PM gaps (critical equipment with no PM coverage)",
          "Gap list showing A-critical assets lacking adequate preventive maintenance"),
    _item("4-4", "Identify PM overlaps and redundancies (same task multiple frequencies)",
          "Consolidation opportunities reducing duplicate PM effort"),
    _item("4-5", "Research RCM (Reliability-Centered Maintenance) methodology and SAE JA1011 standard",
          "RCM reference guide and decision logic tree for team training"),
    _item("4-6", "Form cross-functional RCM team (ops, maintenance, engineering, EHS)",
          "RCM team roster with assigned equipment focus areas"),
    _item("4-7", "Conduct RCM analysis on top 20 A-critical equipment",
          "RCM worksheets documenting: functions, functional failures, failure modes, effects, consequences"),
    _item("4-8", "Apply RCM decision logic to select optimal maintenance tasks",
          "RCM decisions: Condition-directed, time-directed, failure-finding, or run-to-failure"),
    _item("4-9", "Calculate P-F intervals for condition-based tasks using historical data",
          "P-F curves showing optimal inspection intervals before functional failure"),
    _item("4-10", "Optimize time-based PM frequencies using MTBF (Mean Time Between Failures)",
          "Revised PM frequencies: if MTBF=2000hrs, PM at 1600hrs (80% of MTBF)"),
    _item("4-11", "Develop condition-based monitoring (CBM) strategy for critical rotating equipment",
          "CBM plan: vibration analysis on pumps/motors, thermography on electrical, oil analysis on gearboxes"),
    _item("4-12", "Procure condition monitoring equipment (vibration pen, thermal camera, oil test kits)",
          "Equipment purchased with calibration certificates and user manuals"),
    _item("4-13", "Train technicians on CBM technologies and data interpretation",
          "Training records: vibration analysis (ISO 18436), thermography (Level 1), oil analysis sampling"),
    _item("4-14", "Eliminate low-value PMs (no failures prevented, high cost)",
          "List of eliminated PMs with projected annual labor savings (target 30-40% reduction)"),
    _item("4-15", "Standardize remaining PM task procedures with visual work instructions",
          "PM procedures with step-by-step photos, torque specs, safety warnings, quality checks"),
    _item("4-16", "Create PM task library in CMMS with templated checklists",
          "Standardized PM tasks ready to assign to equipment (e.g., 'Monthly Motor PM Template')"),
    _item("4-17", "Establish dedicated planner/scheduler role (full-time or 50% assignment)",
          "Job description posted, candidate hired/assigned, workspace and tools provided"),
    _item("4-18", "Train planner on CMMS, scheduling rules, and backlog management",
          "Planner training complete: PM generation, work order prioritization, parts kitting, schedule optimization"),
    _item("4-19", "Build 52-week rolling PM schedule optimized by crew, skills, and shutdown windows",
          "Annual PM calendar with labor loading balanced and shutdown coordination"),
    _item("4-20", "Implement PM compliance tracking dashboard",
          "Weekly dashboard: PM compliance % (target >95%), overdue PMs, completion trends"),
    _item("4-21", "Calculate cost-benefit analysis of PM optimization",
          "ROI report: labor hours saved, materials reduced, downtime avoided, projected annual savings"),
    _item("4-22", "Present PM Excellence results to leadership with 3-year roadmap",
          "Executive presentation: current state vs. optimized state, savings realized, next steps (IoT, AI/ML)"),
    _item("5-1", "Research industry-standard maintenance KPIs (SMRP Best Practices)",
          "KPI reference guide with definitions and calculation formulas"),
    _item("5-2", "Select 15-20 KPIs aligned to business objectives",
          "KPI list: MTBF, MTTR, OEE, PM compliance %, reactive %, schedule compliance %, wrench time %, parts availability %, inventory turnover, downtime hours, safety incidents, training hours, backlog weeks, emergency work %, labor productivity"),
    _item("5-3", "Calculate 12-month baseline for each KPI using historical data",
          "Baseline KPI dashboard showing current state performance"),
    _item("5-4", "Set target KPIs based on industry benchmarks and improvement goals",
          "Target KPIs: PM compliance >95%, reactive work <20%, MTBF +25%, MTTR -30%, OEE >85%"),
    _item("5-5", "Identify world-class benchmark performance for each KPI",
          "World-class reference: PM compliance 99%, reactive work 10%, OEE 90%+"),
    _item("5-6", "Design real-time KPI dashboard in MaintenanceHub Reports module",
          "Live dashboard showing color-coded KPIs (red/yellow/green) updated hourly"),
    _item("5-7", "Configure automated data feeds from CMMS to dashboard",
          "Data connections: work orders, equipment, PMs, downtime, inventory pulling automatically"),
    _item("5-8", "Build weekly maintenance report template",
          "Automated report: PM compliance, reactive backlog, top 5 bad actors, safety, action items"),
    _item("5-9", "Build monthly maintenance report template",
          "Automated report: KPI trends, cost analysis, RCA summary, training, budget variance"),
    _item("5-10", "Schedule automated report distribution to leadership",
          "Email automation: weekly reports Monday 8am, monthly reports 1st of month"),
    _item("5-11", "Design daily management boards for shop floor (Tier 1 meetings)",
          "Visual boards showing: today's priorities, yesterday's wins, safety, quality, delivery metrics"),
    _item("5-12", "Install physical boards or digital displays in maintenance shop",
          "Boards mounted in high-traffic area with laminated metrics and dry-erase sections"),
    _item("5-13", "Establish daily 15-minute stand-up meetings at the board (Tier 1)",
          "Standing daily meeting 7:00am with attendance tracking and action log"),
    _item("5-14", "Implement OEE (Overall Equipment Effectiveness) tracking system",
          "OEE calculated: Availability x Performance x Quality for all critical production lines"),
    _item("5-15", "Configure OEE data collection (downtime logging, speed tracking, quality defects)",
          "OEE data flowing from production systems into MaintenanceHub automatically"),
    _item("5-16", "Analyze work order trends to identify chronic problems",
          "Monthly Pareto analysis: top 10 equipment by downtime, top 10 failure modes, top 10 cost drivers"),
    _item("5-17", "Conduct root cause analysis on top bad actors identified in trend analysis",
          "RCAs completed for #1-3 highest downtime assets with corrective action plans"),
    _item("5-18", "Establish quarterly business review (QBR) meeting with leadership",
          "QBR calendar scheduled, 2-hour meeting format, standard agenda template created"),
    _item("5-19", "Create QBR presentation template",
          "PowerPoint deck: executive summary, KPI dashboard, wins, challenges, ROI, 90-day action plan"),
    _item("5-20", "Conduct first QBR presenting maintenance performance and improvement roadmap",
          "QBR meeting minutes with leadership feedback and approved action items"),
    _item("5-21", "Benchmark performance against industry standards (ISEMC, SMRP, plant networks)",
          "Benchmark report showing performance gaps vs. peer companies and best-in-class"),
    _item("5-22", "Develop 90-day continuous improvement action plan based on data insights",
          "Action plan with 5-10 improvement projects, owners, timelines, and expected impact"),
    _item("6-1", "Research TPM (Total Productive Maintenance) methodology and 8 pillars",
          "TPM reference guide explaining all 8 pillars with implementation approach"),
    _item("6-2", "Select TPM Pillar 1 (Autonomous Maintenance) as first focus area",
          "Implementation plan for operator ownership of routine equipment care"),
    _item("6-3", "Define operator ownership zones (assign equipment to specific operators)",
          "Equipment ownership map with operator names assigned to machines/lines"),
    _item("6-4", "Develop autonomous maintenance 7-step methodology",
          "7 Steps: Initial cleaning, eliminate contamination sources, set standards, general inspection, autonomous inspection, organization/tidiness, full autonomous maintenance"),
    _item("6-5", "Design operator care training curriculum",
          "Training modules: clean-inspect-lubricate (CIL), defect identification, minor adjustments, 5S, safety"),
    _item("6-6", "Deliver operator care training to 100% of production operators",
          "Training attendance records for all shifts with hands-on equipment exercises"),
    _item("6-7", "Create visual daily inspection checklists for each equipment type",
          "Laminated pre-shift inspection sheets with photos and normal/abnormal examples"),
    _item("6-8", "Implement defect tagging system (red tags for operators to flag issues)",
          "Red tag process: operator applies tag, maintenance responds within 24hrs, close-out tracking"),
    _item("6-9", "Establish daily 5-minute pre-shift equipment walkaround inspections",
          "Inspection compliance tracking showing >90% daily completion by operators"),
    _item("6-10", "Launch 5S program in maintenance shop (Sort, Set, Shine, Standardize, Sustain)",
          "5S audit checklist with before/after photos and monthly compliance scores"),
    _item("6-11", "Design recognition and rewards program for maintenance excellence",
          "Program charter: Monthly awards (Safety Star, RCA Champion, Uptime Hero), criteria, prizes"),
    _item("6-12", "Launch recognition program with first monthly awards ceremony",
          "Award ceremony photos, winner announcements, tracking of winners over time"),
    _item("6-13", "Plan first Kaizen improvement event (3-5 day focused blitz)",
          "Kaizen charter: problem statement, team, scope, goals, timeline, resources"),
    _item("6-14", "Facilitate Kaizen event following structured A3 problem-solving",
          "Completed A3 report: current state, root cause, countermeasures, results, standardization"),
    _item("6-15", "Document Kaizen results and savings (labor, materials, downtime avoided)",
          "Kaizen storyboard showing before/after metrics and annualized savings ($XX,XXX)"),
    _item("6-16", "Schedule 3 additional Kaizen events for the year (quarterly cadence)",
          "Kaizen calendar with topics, dates, facilitators, and expected participants"),
    _item("6-17", "Build 3-year reliability engineering technology roadmap",
          "Roadmap: Year 1 (CBM expansion), Year 2 (IoT sensors, predictive analytics), Year 3 (AI/ML, digital twins)"),
    _item("6-18", "Pilot IoT condition monitoring on 2-3 critical assets",
          "IoT pilot: sensors installed, data streaming to cloud, alerts configured, ROI tracked"),
    _item("6-19", "Create competency matrix for maintenance technicians",
          "Skills matrix: rows=technicians, columns=skills (electrical, mechanical, welding, PLC, etc.), colored by proficiency"),
    _item("6-20", "Identify training gaps and develop individual development plans (IDPs)",
          "Training needs analysis with annual training budget and course schedule"),
    _item("6-21", "Conduct annual maintenance excellence assessment",
          "Assessment using world-class framework (e.g., SMRP Best Practices, TPM Prize criteria)"),
    _item("6-22", "Develop next-year improvement plan based on assessment findings",
          "Annual improvement plan: gaps identified, priorities, projects, budget, owners, timelines"),
    _item("6-23", "Celebrate wins and communicate success stories across organization",
          "Communication plan: newsletter articles, leadership presentations, team celebrations, lessons learned"),
)


def _checklist_for(phase: int) -> tuple[ChecklistItem, ...]:
    prefix = f"{phase}-"
    return tuple(item for item in _CHECKLIST_ITEMS if item.id.startswith(prefix))


# ═════════════════════════════════════════════════════════════════════════════
# Phases
# ═════════════════════════════════════════════════════════════════════════════

PROGRAM_PHASES: tuple[ProgramPhase, ...] = (
    ProgramPhase(
        number=0,
        title="Initial Process Assessment",
        description="Evaluate current maintenance processes to generate your custom improvement roadmap",
        objective=(
            "Conduct a comprehensive assessment of current maintenance practices using the "
            "Maintenance Process Scorecard. Assessment results generate prioritized improvement "
            "actions for phases 1-6."
        ),
        timeline="1-2 weeks",
        key_deliverables=(
            "Complete Maintenance Process Scorecard assessment (100 points total)",
            "Gap analysis identifying improvement opportunities by category",
            "Baseline maturity score for future comparison",
            "Priority ranking of improvement areas by impact (8-point items are critical)",
        ),
        checklist=_checklist_for(0),
    ),
    ProgramPhase(
        number=1,
        title="Equipment Criticality Assessment",
        description="Establish equipment priorities using risk-based methodology",
        objective=(
            "Create a comprehensive ABC criticality classification for all equipment using "
            "systematic scoring methodology (FMEA/Risk Matrix)."
        ),
        timeline="4-6 weeks",
        key_deliverables=(
            "Complete equipment inventory with asset hierarchy",
            "5x5 criticality scoring matrix (Safety, Environment, Production, Quality, MTTR, Cost)",
            "ABC classification applied to all equipment",
            "FMEA completed for top 10 critical assets",
            "Risk heat map visualization",
            "Baseline KPI dashboard (MTBF, MTTR, OEE, downtime %)",
        ),
        checklist=_checklist_for(1),
    ),
    ProgramPhase(
        number=2,
        title="Root Cause Analysis System",
        description="Build problem-solving capabilities using 5 Whys and Fishbone methodologies",
        objective=(
            "Transform the organization from reactive firefighting to proactive problem-solving "
            "with RCA methodologies (5 Whys, Fishbone, FMEA)."
        ),
        timeline="8-12 weeks",
        key_deliverables=(
            "RCA training curriculum delivered to 100% of maintenance staff",
            "Documented RCA policy with mandatory triggers",
            "Completed RCAs for 5 recent failures (practice exercises)",
            "Weekly RCA review meeting established",
            "3-tier certification program launched",
            "Monthly effectiveness scorecard tracking repeat failures",
        ),
        checklist=_checklist_for(2),
    ),
    ProgramPhase(
        number=3,
        title="Storeroom MRO Optimization",
        description="Transform storeroom using ABC analysis, EOQ, and digital tracking",
        objective=(
            "Reduce inventory carrying costs by 20-30% while improving parts availability using "
            "ABC analysis, EOQ calculations, and modern tracking systems."
        ),
        timeline="6-8 weeks",
        key_deliverables=(
            "100% physical inventory audit with reconciliation",
            "ABC analysis applied to all parts",
            "EOQ calculations for A+B items",
            "Min/Max levels set with safety stock",
            "Equipment Bill of Materials for critical assets",
            "Barcode system implemented",
            "Inventory performance dashboard",
        ),
        checklist=_checklist_for(3),
    ),
    ProgramPhase(
        number=4,
        title="Preventive Maintenance Excellence",
        description="Optimize PM program using RCM principles and predictive technologies",
        objective=(
            "Move the PM program from time-based to condition-based using Reliability-Centered "
            "Maintenance (RCM) principles, reducing unnecessary PMs by 30-40%."
        ),
        timeline="8-12 weeks",
        key_deliverables=(
            "Current PM program audit findings",
            "RCM analysis for critical equipment",
            "Condition-based monitoring strategy",
            "Planner/scheduler role established",
            "PM compliance dashboard (target >95%)",
            "Cost-benefit analysis showing savings",
        ),
        checklist=_checklist_for(4),
    ),
    ProgramPhase(
        number=5,
        title="Data-Driven Performance Management",
        description="Implement KPI dashboards and continuous improvement culture",
        objective=(
            "Build a data-driven reliability culture with real-time KPI tracking, automated "
            "reporting, and daily management systems."
        ),
        timeline="4-6 weeks",
        key_deliverables=(
            "Maintenance KPI dashboard (15-20 metrics)",
            "Automated weekly/monthly reports",
            "Daily management boards for shop floor",
            "OEE tracking system",
            "Quarterly business reviews",
            "Benchmarking against industry standards",
        ),
        checklist=_checklist_for(5),
    ),
    ProgramPhase(
        number=6,
        title="Continuous Improvement & Sustainability",
        description="Embed maintenance excellence into organizational culture",
        objective=(
            "Sustain gains through TPM, operator care programs, and recognition systems."
        ),
        timeline="Ongoing",
        key_deliverables=(
            "Autonomous maintenance program (TPM Pillar 1)",
            "Operator care training curriculum",
            "Recognition and rewards program",
            "Continuous improvement Kaizen events",
            "Training competency matrix",
            "Annual excellence assessment",
        ),
        checklist=_checklist_for(6),
    ),
)

_PHASES_BY_NUMBER = {phase.number: phase for phase in PROGRAM_PHASES}


def validate_phase_number(phase, *, allow_assessment: bool = True) -> int:
    """Return ``phase`` as an int, or raise ValidationError if it is not a program phase."""
    valid = ALL_PHASES if allow_assessment else IMPLEMENTATION_PHASES
    if isinstance(phase, bool) or not isinstance(phase, int) or phase not in valid:
        raise ValidationError(
            f"phase must be one of {list(valid)}",
            details={"phase": phase},
        )
    return phase


def get_phase(phase: int) -> ProgramPhase:
    return _PHASES_BY_NUMBER[validate_phase_number(phase)]


def get_checklist(phase: int) -> tuple[ChecklistItem, ...]:
    return get_phase(phase).checklist


def checklist_catalog() -> dict[int, tuple[ChecklistItem, ...]]:
    """Checklist per phase number, phases 0–6."""
    return {phase.number: phase.checklist for phase in PROGRAM_PHASES}


# ═════════════════════════════════════════════════════════════════════════════
# Default scorecard
# ═════════════════════════════════════════════════════════════════════════════

def _element(item_id, activity_code, activity_name, element_number, description,
             *, possible, category, guide) -> AssessmentItem:
    return AssessmentItem(
        id=item_id,
        activity_code=activity_code,
        activity_name=activity_name,
        element_number=element_number,
        description=description,
        possible_score=possible,
        actual_score=0,
        category=category,
        scoring_guide=guide,
    )


_DEFAULT_ASSESSMENT: tuple[AssessmentItem, ...] = (
    _element("1.1.1", "1.1", "Prepare Equipment Information", 1,
             "A complete equipment record exists for every piece of equipment, the equipment is organized in a logical hierarchy, and equipment is easy to locate.",
             possible=2, category="Equipment Records",
             guide="Equipment records complete and organized in logical hierarchy"),
    _element("1.1.2", "1.1", "Prepare Equipment Information", 2,
             "Breakdowns and trouble calls are tracked, graphed, and priorities understood.",
             possible=4, category="Failure Tracking",
             guide="Active tracking and visualization of breakdown data with clear prioritization"),
    _element("1.1.3", "1.1", "Prepare Equipment Information", 3,
             "Appropriate work order types are used to track emergency, corrective, and preventive maintenance work.",
             possible=2, category="Work Order Management",
             guide="Work order types properly defined and consistently used"),
    _element("1.1.4", "1.1", "Prepare Equipment Information", 4,
             "BOMs (Bills of Materials) are in place for A-Critical equipment.",
             possible=8, category="Equipment Records",
             guide="Complete BOMs for all critical A-class equipment"),
    _element("1.1.5", "1.1", "Prepare Equipment Information", 5,
             "A technical document management system is in place.",
             possible=4, category="Documentation",
             guide="Organized system for managing technical documents with version control"),
    _element("1.1.6", "1.1", "Prepare Equipment Information", 6,
             "Model line technical documentation is available and up to date.",
             possible=2, category="Documentation",
             guide="Current technical documentation for model/reference lines"),
    _element("1.2.1", "1.2", "Evaluate & Prioritize Equipment", 1,
             "Equipment is ranked by criticality A, B & C.",
             possible=4, category="Criticality Assessment",
             guide="All equipment classified using ABC criticality methodology"),
    _element("1.2.2", "1.2", "Evaluate & Prioritize Equipment", 2,
             "Equipment # and priority rank are clearly marked on equipment and known by factory floor associates.",
             possible=2, category="Visual Management",
             guide="Visible asset tags with criticality markings; operators can identify rankings"),
    _element("1.2.3", "1.2", "Evaluate & Prioritize Equipment", 3,
             "An NFPA 70E arc flash assessment has been completed and a prevention program is in place.",
             possible=8, category="Safety",
             guide="Complete arc flash study with labels, PPE requirements, and training program"),
    _element("1.3.1", "1.3", "Define & Classify Failures", 1,
             "Failure definitions are established: \"equipment breakdown\" (part required), \"process failure\" (stop >10 min, no part), \"minor stop\" (<10 min), \"trouble call\" (non-breakdown emergency). Codes with time constraints defined and known.",
             possible=2, category="Failure Classification",
             guide="Clear failure type definitions known by all maintenance and operations personnel"),
    _element("1.4.1", "1.4", "Understand Conditions & Level of Maintenance", 1,
             "Existing PMs have been cleaned up, and PM strategies have been developed based on equipment criticality. Robust 5S lubrication program exists.",
             possible=4, category="PM Strategy",
             guide="PM optimization complete with criticality-based strategies and lubrication program"),
    _element("1.4.2", "1.4", "Understand Conditions & Level of Maintenance", 2,
             "PM completion rate >= 95% (Focus on criticality \"A\" first).",
             possible=4, category="PM Execution",
             guide="Sustained PM completion rate at or above 95% with A-critical priority"),
    _element("1.4.3", "1.4", "Understand Conditions & Level of Maintenance", 3,
             "Current maintenance workflow is understood and documented.",
             possible=2, category="Process Documentation",
             guide="Documented workflow with clear roles, responsibilities, and handoffs"),
    _element("1.4.4", "1.4", "Understand Conditions & Level of Maintenance", 4,
             "70% Maintenance time is captured on a work order.",
             possible=4, category="Work Order Management",
             guide="At least 70% of maintenance labor hours documented on work orders"),
    _element("1.4.5", "1.4", "Understand Conditions & Level of Maintenance", 5,
             "Basic storeroom management has been established.",
             possible=8, category="Storeroom Management",
             guide="Organized storeroom with min/max levels, reorder points, and proper controls"),
    _element("1.4.6", "1.4", "Understand Conditions & Level of Maintenance", 6,
             "Parts are ranked by ABC & critical spares identified.",
             possible=4, category="Storeroom Management",
             guide="Parts classified ABC with critical spares on BOM regardless of equipment rank"),
    _element("1.4.7", "1.4", "Understand Conditions & Level of Maintenance", 7,
             "Training program evaluated, skills needs assessment completed, training policy and priorities established, aligned with business goals.",
             possible=8, category="Maintenance Skills",
             guide="Complete skills gap analysis with training policy aligned to business objectives"),
    _element("1.5.1", "1.5", "Establish Baselines & Improvement Targets", 1,
             "A Maintenance scorecard is in place with baselines and improvement targets established.",
             possible=8, category="Performance Management",
             guide="Scorecard includes: costs, breakdowns, OEE loss, MRO value, planned vs unplanned, PM completion"),
    _element("1.6.1", "1.6", "PM Management", 1,
             "Maintenance has staffed and developed a Planned Maintenance structure. Lead Maintenance Planner has developed a kitting program.",
             possible=4, category="Planning & Scheduling",
             guide="Dedicated planner role with cross-functional PM improvement team (Ops, Finance, Eng, CI)"),
    _element("1.6.2", "1.6", "PM Management", 2,
             "Cross-functional team meets at least weekly to review planned maintenance schedule and PM trends. Agenda used and minutes tracked.",
             possible=4, category="Planning & Scheduling",
             guide="Weekly cross-functional meetings with documented agenda and minutes"),
    _element("1.6.3", "1.6", "PM Management", 3,
             "Planned maintenance communication board is in place and up to date displaying upcoming planned maintenance work and PM trends.",
             possible=2, category="Visual Management",
             guide="Visible communication board with current PM schedule and trends"),
    _element("1.6.4", "1.6", "PM Management", 4,
             "Maintenance uses failure data in daily meetings to prevent breakdowns and eliminate defects.",
             possible=2, category="Continuous Improvement",
             guide="Daily review of breakdown and trouble call data in shift/daily meetings"),
    _element("1.6.5", "1.6", "PM Management", 5,
             "Maintenance shop at 5S level.",
             possible=8, category="5S Standards",
             guide="Shop meets 5S standards with monthly audits sustained for 3+ consecutive months"),
)


def default_assessment_items() -> list[AssessmentItem]:
    """The unscored 23-element Maintenance Process Assessment, in scorecard order."""
    return list(_DEFAULT_ASSESSMENT)
