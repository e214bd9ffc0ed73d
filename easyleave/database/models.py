from easyleave import db as orm  # alias, so it is not confused with the easyleave.database package

class Employee(orm.Model):
    __tablename__ = "employees"

    emp_id = orm.Column(orm.Integer, primary_key=True)
    name = orm.Column(orm.String(100), nullable=False)
    email = orm.Column(orm.String(120), nullable=False, unique=True)
    avatar = orm.Column(orm.String(255))
    role = orm.Column(orm.String(16), nullable=False, default="Employee")  # Employee | Supervisor | Manager | HR | Admin
    supervisor_id = orm.Column(orm.Integer, orm.ForeignKey("employees.emp_id"), nullable=True)
    is_active = orm.Column(orm.Boolean, nullable=False, default=True)
    created_at = orm.Column(orm.DateTime, nullable=False, server_default=orm.func.now())

    supervisor = orm.relationship("Employee", remote_side=[emp_id], backref="reports")
    contracts = orm.relationship("Contract", backref="employee", order_by="Contract.start_date")

class Contract(orm.Model):
    __tablename__ = "contracts"

    contract_id = orm.Column(orm.Integer, primary_key=True)
    emp_id = orm.Column(orm.Integer, orm.ForeignKey("employees.emp_id", ondelete="CASCADE"), nullable=False)
    title = orm.Column(orm.String(100), nullable=False)
    team = orm.Column(orm.String(100), nullable=False)
    contract_type = orm.Column(orm.String(16), nullable=False)  # Staff | Independent | Internship
    start_date = orm.Column(orm.Date, nullable=False)
    end_date = orm.Column(orm.Date, nullable=True)

class LeaveRequest(orm.Model):
    __tablename__ = "leave_requests"

    req_id = orm.Column(orm.Integer, primary_key=True)
    emp_id = orm.Column(orm.Integer, orm.ForeignKey("employees.emp_id"), nullable=False, index=True)
    leave_type = orm.Column(orm.String(16), nullable=False)  # Annual | Sick | Paternity | Maternity | Circumstance
    circumstance_type = orm.Column(orm.String(16))
    start_date = orm.Column(orm.Date, nullable=False)
    end_date = orm.Column(orm.Date, nullable=False)
    status = orm.Column(orm.String(20), nullable=False, index=True)
    supervisor_reason = orm.Column(orm.Text, nullable=False, default="")
    manager_reason = orm.Column(orm.Text, nullable=False, default="")
    comment = orm.Column(orm.Text, nullable=False, default="")
    submission_date = orm.Column(orm.DateTime, nullable=False)
    document_url = orm.Column(orm.String(500))
    supervisor_id = orm.Column(orm.Integer, orm.ForeignKey("employees.emp_id"), nullable=True)
    version = orm.Column(orm.Integer, nullable=False, default=1)

    employee = orm.relationship("Employee", foreign_keys=[emp_id], backref="leave_requests")

class LeaveHistory(orm.Model):
    __tablename__ = "leave_history"

    entry_id = orm.Column(orm.Integer, primary_key=True)
    req_id = orm.Column(orm.Integer, orm.ForeignKey("leave_requests.req_id", ondelete="CASCADE"), nullable=False, index=True)
    action = orm.Column(orm.String(16), nullable=False)  # submitted | approved | rejected | status_changed
    status = orm.Column(orm.String(20), nullable=False)
    previous_status = orm.Column(orm.String(20))
    actor_id = orm.Column(orm.Integer, nullable=False)
    actor_name = orm.Column(orm.String(100), nullable=False)
    actor_role = orm.Column(orm.String(16), nullable=False)
    timestamp = orm.Column(orm.DateTime, nullable=False)
    comment = orm.Column(orm.Text)
    reason = orm.Column(orm.Text)
