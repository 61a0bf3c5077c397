import streamlit as st

from services.reference_data import (
    BTU_TO_KWH,
    GWP100_CH4,
    GWP20_CH4,
    KG_CH4_PER_THERM,
    TOTAL_LEAKAGE_RATE,
)
from utils.ui_layout import init_page_layout

render_layout = init_page_layout(
    page_title="Home",
    main_title="ElectrifyLab guide",
    description="How the planner sizes equipment and estimates costs, savings and emissions.",
)
render_layout()

st.markdown(
    f"""
## Welcome to ElectrifyLab
A planning-grade calculator for replacing gas appliances with heat pumps, heat pump water
heaters, induction ranges and heat pump dryers. Every number updates as you edit inputs.

### Run the workflow
1) On the **Planner**, pick the facility type, climate zone, rebate program and grid region.
2) Enter annual gas use (therms) from utility bills; heating and non-heating are split because
   they are attributed to different appliances.
3) Describe the electrical panel: rating, voltage, free breaker spaces and, when known, the
   measured peak load.
4) Add each gas appliance with its input rating (BTU/hr) and efficiency. Untick **Include** to keep
   an appliance in the building without replacing it.
5) Set prices, escalation rates and any EV charging, then review the results.
6) Open **Full report** for charts and the PDF export, or **Save / load** to keep the project.

### How the estimate works
- **Sizing:** heat pumps are sized to deliver the same peak output as the gas unit, rounded to the
  nearest half ton. Water heaters map to 50, 65 or 80 gallon heat pump models.
- **Electrical load:** each replacement's peak kW becomes amps at the panel voltage. Loads are
  diversified (not everything runs at once) and added to the existing load; above 80% of the
  panel rating an upgrade is recommended.
- **Energy:** annual therms are shared out by each included appliance's share of rated BTU, turned
  into useful heat with the appliance efficiency, then into kWh with a heat pump COP
  (1 BTU = {BTU_TO_KWH} kWh).
- **Emissions:** gas combustion CO2 plus leaked methane ({KG_CH4_PER_THERM} kg CH4 per therm at a
  {TOTAL_LEAKAGE_RATE:.1%} leak rate), weighted at {GWP20_CH4:.0f}x (20-year) and {GWP100_CH4:.0f}x
  (100-year), against grid electricity emissions.
- **Lifetime:** 15 years of escalating fuel prices with flat maintenance; the electric line starts at the net project cost.
  The high-risk gas line models faster gas price growth as customers leave the gas system.

### Tips
- Rebates apply only when a qualifying replacement is in the plan; the panel rebate also needs a
  heat pump.
- Payback shows N/A when the project has no net cost or does not save money each year.
- Use a cost-table file (Save / load page) to apply local contractor pricing.
    """
)
